from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, List, Optional

from photonav.services.task_runner import TaskRunner

from .discovery import SequenceDiscoverer
from .errors import DestinationMissingError, NoRouteFoundError
from .models import CursorSnapshot, DiscoveryState, StepSequence
from .prefetch import Prefetcher
from .stepper import Stepper

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[CursorSnapshot], None]


class NavigationSession:
    """One visit to one destination: the discovered sequence plus its cursor."""

    def __init__(
        self,
        destination: Optional[str],
        *,
        prefetcher: Optional[Prefetcher] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.destination = (destination or "").strip()
        self.closed = False
        self._prefetcher = prefetcher
        self.stepper = Stepper(on_position_change=self._prefetch)
        self._listeners: List[SnapshotListener] = []
        self._detach = self.stepper.subscribe(self.publish)

    def subscribe(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> CursorSnapshot:
        stepper = self.stepper
        cursor = stepper.cursor
        return CursorSnapshot(
            session_id=self.session_id,
            destination=self.destination,
            discovery_state=cursor.discovery_state,
            position=cursor.position,
            total_steps=stepper.total_steps,
            last_direction=cursor.last_direction,
            asset_ready=cursor.asset_ready,
            at_destination=stepper.at_destination,
            current_step=stepper.current_step,
            next_step=stepper.next_step,
            failure=self.failure_reason,
            failure_code=self.failure_code,
        )

    def apply_discovery(self, sequence: StepSequence) -> None:
        if self.closed:
            logger.info("Dropping discovery result for closed session %s", self.session_id)
            return
        if sequence.is_empty:
            logger.info("No route published for %s", self.destination)
        self.stepper.load(sequence)

    def close(self) -> None:
        self.closed = True
        self._detach()
        self._listeners.clear()

    # Transitions are only forwarded while the session is live.

    def advance(self) -> bool:
        return not self.closed and self.stepper.advance()

    def retreat(self) -> bool:
        return not self.closed and self.stepper.retreat()

    def restart(self) -> bool:
        return not self.closed and self.stepper.restart()

    def mark_asset_ready(self) -> bool:
        return not self.closed and self.stepper.mark_asset_ready()

    @property
    def failure_reason(self) -> Optional[str]:
        state = self.stepper.state
        if state is DiscoveryState.EMPTY:
            return str(NoRouteFoundError(self.destination))
        return self.stepper.failure

    @property
    def failure_code(self) -> Optional[str]:
        if self.stepper.state is DiscoveryState.EMPTY:
            return NoRouteFoundError.code
        return self.stepper.failure_code

    def _prefetch(self, step: Any) -> None:
        if self._prefetcher is not None and not self.closed:
            self._prefetcher.schedule(step)

    def publish(self) -> None:
        if self.closed:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)


class NavigationController:
    """Owns the active navigation session of one client.

    Opening a destination replaces (and tears down) the previous session. A
    discovery result is applied only while its originating session is still
    the active one.
    """

    def __init__(
        self,
        discoverer: SequenceDiscoverer,
        *,
        prefetcher: Optional[Prefetcher] = None,
        runner: Optional[TaskRunner] = None,
    ) -> None:
        self.discoverer = discoverer
        self.prefetcher = prefetcher
        self._runner = runner or TaskRunner()
        self._active: Optional[NavigationSession] = None
        self._discovery_task: Optional[asyncio.Task[Any]] = None
        self._listeners: List[SnapshotListener] = []

    @property
    def active(self) -> Optional[NavigationSession]:
        return self._active

    def subscribe(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def open(self, destination: Optional[str]) -> NavigationSession:
        """Start a session and schedule its discovery in the background."""
        session = self._replace_session(destination)
        if session.stepper.state is DiscoveryState.LOADING:
            self._discovery_task = self._runner.create(
                self._discover(session), name=f"discovery-{session.session_id}"
            )
        return session

    async def navigate(self, destination: Optional[str]) -> NavigationSession:
        """Start a session and wait for its discovery to finish."""
        session = self._replace_session(destination)
        if session.stepper.state is DiscoveryState.LOADING:
            await self._discover(session)
        return session

    async def wait_discovery(self) -> None:
        """Wait for the background discovery of the active session, if any."""
        task = self._discovery_task
        if task is None:
            return
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def leave(self) -> None:
        self._cancel_discovery()
        if self._active is not None:
            logger.info("Leaving navigation session %s", self._active.session_id)
            self._active.close()
            self._active = None

    async def shutdown(self) -> None:
        self.leave()
        await self._runner.shutdown()

    def _replace_session(self, destination: Optional[str]) -> NavigationSession:
        self.leave()
        session = NavigationSession(destination, prefetcher=self.prefetcher)
        for listener in self._listeners:
            session.subscribe(listener)
        self._active = session
        logger.info(
            "Opened navigation session %s for %r", session.session_id, session.destination
        )
        if not session.destination:
            missing = DestinationMissingError()
            session.stepper.fail(str(missing), missing.code)
        else:
            session.publish()
        return session

    async def _discover(self, session: NavigationSession) -> None:
        try:
            sequence = await self.discoverer.discover(session.destination)
        except DestinationMissingError as exc:
            if self._active is session:
                session.stepper.fail(str(exc), exc.code)
            return
        if self._active is not session:
            logger.info(
                "Discarding discovery for %s: session %s is no longer active",
                session.destination,
                session.session_id,
            )
            return
        session.apply_discovery(sequence)

    def _cancel_discovery(self) -> None:
        task = self._discovery_task
        self._discovery_task = None
        if task is not None and not task.done():
            task.cancel()
