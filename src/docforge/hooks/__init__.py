"""DocForge document lifecycle hook system.

Hooks run before (pre) and after (post) the core action of a document
operation:
- init: Hydrating a document from stored data
- validate: Checking field rules
- save: Inserting or updating through the persistence adapter
- remove: Deleting through the persistence adapter

A hook may be a plain function, a coroutine function, or take a ``next``
continuation as its second argument.

Usage:
    from docforge import Schema

    schema = Schema({"title": "string"})

    @schema.pre("save")
    def normalize_title(doc):
        doc.title = doc.title.strip()

    @schema.post("save")
    async def notify(doc):
        await publish("saved", doc.id)
"""

from docforge.hooks.registry import HookRegistry, HookSet, hook
from docforge.hooks.service import HookEngine
from docforge.hooks.types import (
    Hook,
    HookStyle,
    Phase,
    RunOutcome,
    RunStage,
    resolve_style,
)

VALID_OPERATIONS = ("init", "validate", "save", "remove")

__all__ = [
    "Hook",
    "HookEngine",
    "HookRegistry",
    "HookSet",
    "HookStyle",
    "Phase",
    "RunOutcome",
    "RunStage",
    "VALID_OPERATIONS",
    "hook",
    "resolve_style",
]
