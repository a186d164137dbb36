"""Hook system types for DocForge.

Defines the core data structures for the document lifecycle hook system:
- Phase: whether a hook runs before or after the core action
- HookStyle: how a hook signals completion (resolved at registration)
- Hook: a registered callback bound to a phase and an operation
- RunOutcome: result of running an operation through the engine
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Phase(Enum):
    """When a hook runs relative to the core action."""

    PRE = "pre"
    POST = "post"


class HookStyle(Enum):
    """How a hook signals completion.

    SYNC: Completes when it returns (an awaitable return value is awaited)
    AWAITABLE: Coroutine function, completes when awaited
    CONTINUATION: Receives a ``next`` callable and completes when it is called
    """

    SYNC = "sync"
    AWAITABLE = "awaitable"
    CONTINUATION = "continuation"


class RunStage(Enum):
    """Where in an operation a failure happened."""

    PRE = "pre"
    ACTION = "action"
    POST = "post"


def resolve_style(fn: Callable[..., Any]) -> HookStyle:
    """Work out the completion style of a hook callable.

    A callable taking two or more required positional arguments is
    continuation-style: ``fn(doc, next)``.
    """
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        params = []

    required = [
        p
        for p in params
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        and p.default is p.empty
    ]
    if len(required) >= 2:
        return HookStyle.CONTINUATION
    if inspect.iscoroutinefunction(fn):
        return HookStyle.AWAITABLE
    return HookStyle.SYNC


@dataclass(frozen=True)
class Hook:
    """A callback registered for one phase of one operation.

    Attributes:
        phase: PRE or POST
        operation: Operation name (e.g. "save")
        fn: The callback; receives the document (and ``next`` if continuation-style)
        style: Completion style, fixed at registration
        name: Display name used in logs and CLI output
    """

    phase: Phase
    operation: str
    fn: Callable[..., Any]
    style: HookStyle
    name: str


@dataclass
class RunOutcome:
    """Result of running an operation through the hook engine.

    Attributes:
        instance: The document the operation acted on
        error: The first failure, or None on success
        stage: Where the failure happened (None on success)
        hook: The failing hook, when the failure came from a hook
    """

    instance: Any
    error: BaseException | None = None
    stage: RunStage | None = None
    hook: Hook | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
