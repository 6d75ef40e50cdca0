from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from photonav.services.task_runner import TaskRunner

from .assets import AssetSource
from .models import Step

logger = logging.getLogger(__name__)


class Prefetcher:
    """Fire-and-forget warm load of the step after the current one.

    A new request supersedes a pending one for a different step. Failures are
    logged at debug level and never reach the caller.
    """

    def __init__(
        self,
        source: AssetSource,
        *,
        runner: Optional[TaskRunner] = None,
        enabled: bool = True,
    ) -> None:
        self.source = source
        self.enabled = enabled
        self._runner = runner or TaskRunner()
        self._pending: Optional[asyncio.Task[Any]] = None
        self._pending_path: Optional[str] = None

    def __call__(self, step: Optional[Step]) -> None:
        self.schedule(step)

    def schedule(self, step: Optional[Step]) -> Optional[asyncio.Task[Any]]:
        if not self.enabled or step is None:
            return None
        if self._pending is not None and not self._pending.done():
            if self._pending_path == step.path:
                return self._pending
            self._pending.cancel()
        coro = self._warm(step.path)
        try:
            task = self._runner.create(coro, name=f"prefetch-{step.index}")
        except RuntimeError:
            # no running event loop
            coro.close()
            logger.debug("Prefetch skipped for %s: no running loop", step.path)
            return None
        self._pending = task
        self._pending_path = step.path
        return task

    async def _warm(self, path: str) -> None:
        try:
            await self.source.warm(path)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - prefetch is best effort
            logger.debug("Prefetch failed for %s: %s", path, exc)
