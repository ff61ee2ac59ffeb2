# parabuild_plan.py
# Example plan: a small monorepo where the app and the cli share two libraries.
from __future__ import annotations
from parabuild import plan, unit


def units():
    return plan(
        unit("core", "echo building core"),
        unit("utils", "echo building utils", needs=["core"]),
        unit("net", "echo building net", needs=["core"]),

        # both depend on the two libraries above
        unit("app", "echo building app", needs=["utils", "net"]),
        unit("cli", "echo building cli", needs=["utils"]),
    )
