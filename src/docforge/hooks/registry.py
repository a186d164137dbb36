"""Hook registries for DocForge.

Two registries live here:
- HookSet: the ordered pre/post hook lists a schema owns, keyed by operation
- HookRegistry: global name -> function lookup used by YAML schemas
"""

from collections.abc import Callable
from typing import Any

from docforge.errors import HookError
from docforge.hooks.types import Hook, HookStyle, Phase, resolve_style

HookFn = Callable[..., Any]


def _to_phase(phase: Phase | str) -> Phase:
    if isinstance(phase, Phase):
        return phase
    try:
        return Phase(phase)
    except ValueError:
        raise HookError(f"Unknown hook phase '{phase}', expected 'pre' or 'post'") from None


class HookSet:
    """Ordered hook lists for one schema.

    Hooks for the same phase and operation run in registration order.
    Registering the same function twice makes it run twice.
    """

    def __init__(self) -> None:
        self._hooks: dict[tuple[Phase, str], list[Hook]] = {}

    def register(
        self,
        phase: Phase | str,
        operation: str,
        fn: HookFn,
        *,
        style: HookStyle | None = None,
        name: str | None = None,
    ) -> Hook:
        """Append a hook for (phase, operation).

        Args:
            phase: "pre" or "post"
            operation: Operation name (e.g. "save")
            fn: Hook callable
            style: Override the completion style detected from ``fn``
            name: Display name (defaults to the function name)

        Returns:
            The registered Hook
        """
        if not operation:
            raise HookError("Hook operation name must be a non-empty string")
        if not callable(fn):
            raise HookError(f"Hook for '{operation}' is not callable: {fn!r}")

        hook = Hook(
            phase=_to_phase(phase),
            operation=operation,
            fn=fn,
            style=style or resolve_style(fn),
            name=name or getattr(fn, "__name__", repr(fn)),
        )
        self._hooks.setdefault((hook.phase, operation), []).append(hook)
        return hook

    def get(self, phase: Phase | str, operation: str) -> tuple[Hook, ...]:
        """Return the hooks for (phase, operation) in registration order."""
        return tuple(self._hooks.get((_to_phase(phase), operation), ()))


class HookRegistry:
    """Registry for named hook implementations.

    YAML schemas reference hooks by name; the names must be registered
    before the schema is built, typically at import time via @hook.

    Example:
        @hook("stampUpdatedAt")
        def stamp_updated_at(doc):
            doc.updatedAt = datetime.now(timezone.utc).isoformat()
    """

    _hooks: dict[str, HookFn] = {}

    @classmethod
    def register(cls, name: str, hook_fn: HookFn) -> None:
        """Register a hook function by name.

        Idempotent: re-registering the same name is a no-op.
        """
        if name in cls._hooks:
            return
        cls._hooks[name] = hook_fn

    @classmethod
    def get(cls, name: str) -> HookFn:
        """Get a registered hook function by name.

        Raises:
            ValueError: If hook is not registered
        """
        if name not in cls._hooks:
            raise ValueError(
                f"Hook '{name}' is not registered. "
                "Hooks must be registered before the schema is built."
            )
        return cls._hooks[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._hooks

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered hook names."""
        return sorted(cls._hooks.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._hooks.clear()


def hook(name: str) -> Callable[[HookFn], HookFn]:
    """Decorator to register a named hook function.

    Usage:
        @hook("normalizeTitle")
        def normalize_title(doc):
            doc.title = doc.title.strip()
    """

    def decorator(fn: HookFn) -> HookFn:
        HookRegistry.register(name, fn)
        return fn

    return decorator
