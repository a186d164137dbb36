"""Hook execution engine for DocForge.

Runs an operation's pre hooks, core action and post hooks strictly in
sequence, stopping at the first failure.
"""

import asyncio
import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

from docforge.errors import HookError
from docforge.hooks.registry import HookSet
from docforge.hooks.types import Hook, HookStyle, Phase, RunOutcome, RunStage

logger = logging.getLogger(__name__)

Action = Callable[[], Any]


class HookEngine:
    """Sequences hook execution around a core action.

    The engine keeps no state between runs; one instance can serve any
    number of concurrent operations.
    """

    async def execute(
        self,
        operation: str,
        hooks: HookSet,
        instance: Any,
        action: Action,
    ) -> RunOutcome:
        """Run an operation and report how it went.

        Args:
            operation: Operation name (init, validate, save, remove, ...)
            hooks: The schema's hook lists
            instance: Document passed to every hook
            action: Core action; may be sync or return an awaitable

        Returns:
            RunOutcome with the first failure and the stage it came from,
            or a successful outcome carrying the instance.
        """
        for hook in hooks.get(Phase.PRE, operation):
            try:
                await self._invoke(hook, instance)
            except Exception as e:
                logger.debug("pre '%s' hook '%s' failed: %s", operation, hook.name, e)
                return RunOutcome(instance, error=e, stage=RunStage.PRE, hook=hook)

        try:
            result = action()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.debug("'%s' action failed: %s", operation, e)
            return RunOutcome(instance, error=e, stage=RunStage.ACTION)

        for hook in hooks.get(Phase.POST, operation):
            try:
                await self._invoke(hook, instance)
            except Exception as e:
                logger.debug("post '%s' hook '%s' failed: %s", operation, hook.name, e)
                return RunOutcome(instance, error=e, stage=RunStage.POST, hook=hook)

        return RunOutcome(instance)

    async def run(
        self,
        operation: str,
        hooks: HookSet,
        instance: Any,
        action: Action,
    ) -> Any:
        """Run an operation, returning the instance or raising its first failure."""
        outcome = await self.execute(operation, hooks, instance, action)
        if outcome.error is not None:
            raise outcome.error
        return outcome.instance

    async def _invoke(self, hook: Hook, instance: Any) -> None:
        logger.debug("Running %s '%s' hook '%s'", hook.phase.value, hook.operation, hook.name)
        if hook.style is HookStyle.CONTINUATION:
            await self._invoke_continuation(hook, instance)
            return

        result = hook.fn(instance)
        if inspect.isawaitable(result):
            await result

    async def _invoke_continuation(self, hook: Hook, instance: Any) -> None:
        done: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def next_(error: Any = None) -> None:
            if done.done():
                logger.warning("Hook '%s' called next() more than once", hook.name)
                return
            if error is None:
                done.set_result(None)
            elif isinstance(error, BaseException):
                done.set_exception(error)
            else:
                done.set_exception(HookError(f"Hook '{hook.name}' failed: {error}"))

        try:
            result = hook.fn(instance, next_)
        except Exception as e:
            if not done.done():
                raise
            # Control already moved past this hook when next() was called.
            self._discard_late_error(hook, e)
            result = None

        if inspect.isawaitable(result):
            # next() releases the chain even while the hook body keeps running
            task = asyncio.ensure_future(result)
            await asyncio.wait({task, done}, return_when=asyncio.FIRST_COMPLETED)
            if task.done() and not done.done():
                task.result()
            else:
                task.add_done_callback(functools.partial(self._reap_hook_task, hook))

        await done

    def _reap_hook_task(self, hook: Hook, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._discard_late_error(hook, error)

    @staticmethod
    def _discard_late_error(hook: Hook, error: BaseException) -> None:
        logger.warning(
            "Discarding error from hook '%s' raised after next(): %s",
            hook.name,
            error,
        )
