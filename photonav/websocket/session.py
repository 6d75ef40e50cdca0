from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Protocol

from photonav.features.explorer import ExplorerState
from photonav.features.lookup import StudentLookupError
from photonav.features.navigation import (
    CursorSnapshot,
    NavigationController,
    NavigationSession,
    Prefetcher,
)
from photonav.services.task_runner import TaskRunner
from photonav.websocket.schemas import (
    ErrorMessage,
    ExplorerMessage,
    LookupMessage,
    ManifestMessage,
    NavigationMessage,
    SyncMessage,
)

if TYPE_CHECKING:
    from photonav.app.application import SessionDependencies

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Awaitable[None]]


class Connection(Protocol):
    identifier: str

    async def receive(self) -> Optional[str]: ...

    async def send(self, payload: str) -> None: ...


class ClientSession:
    """Kiosk display client: explorer, identity lookup and guided navigation."""

    def __init__(self, connection: Connection, deps: "SessionDependencies") -> None:
        self.connection = connection
        self.deps = deps
        self.outbox: asyncio.Queue[Dict[str, Any]] = asyncio.Queue()
        self.explorer = ExplorerState()
        self.runner = TaskRunner()
        prefetcher = Prefetcher(
            deps.assets,
            runner=self.runner,
            enabled=deps.config.assets.prefetch_enabled,
        )
        self.navigation = NavigationController(
            deps.discoverer,
            prefetcher=prefetcher,
            runner=self.runner,
        )
        self.navigation.subscribe(self._on_snapshot)
        self._handlers: Dict[str, Handler] = {
            "ping": self._handle_ping,
            "manifest": self._handle_manifest,
            "toggle_category": self._handle_toggle_category,
            "lookup": self._handle_lookup,
            "navigate": self._handle_navigate,
            "next": self._handle_next,
            "prev": self._handle_prev,
            "restart": self._handle_restart,
            "asset_ready": self._handle_asset_ready,
            "leave": self._handle_leave,
        }

    async def run(self) -> None:
        logger.info("Session started: %s", self.connection.identifier)
        self.queue(SyncMessage(state={"phase": "idle"}).as_dict())

        tasks = [
            asyncio.create_task(self._incoming_loop(), name="incoming-loop"),
            asyncio.create_task(self._outgoing_loop(), name="outgoing-loop"),
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                exception = task.exception()
                if exception:
                    raise exception
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self.navigation.shutdown()
            await self.runner.shutdown()
            await self._run_cleanup()
            logger.info("Session finished: %s", self.connection.identifier)

    def queue(self, message: Dict[str, Any]) -> None:
        self.outbox.put_nowait(message)

    async def handle_raw(self, raw: str) -> None:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            self._queue_error("invalid_json", "Message JSON invalide.")
            return
        if not isinstance(payload, dict):
            self._queue_error("invalid_message", "Le message doit être un objet JSON.")
            return
        await self.handle_message(payload)

    async def handle_message(self, payload: Dict[str, Any]) -> None:
        msg_type = payload.get("type")
        handler = self._handlers.get(str(msg_type))
        if handler is None:
            logger.debug("Unhandled incoming message: %s", payload)
            return
        await handler(payload)

    async def _incoming_loop(self) -> None:
        while True:
            raw = await self.connection.receive()
            if raw is None:
                return
            await self.handle_raw(raw)

    async def _outgoing_loop(self) -> None:
        while True:
            message = await self.outbox.get()
            await self.connection.send(json.dumps(message, ensure_ascii=False))

    async def _handle_ping(self, payload: Dict[str, Any]) -> None:
        self.queue({"type": "pong", "timestamp": payload.get("timestamp")})

    async def _handle_manifest(self, payload: Dict[str, Any]) -> None:  # noqa: ARG002
        categories = self.deps.manifest.as_dict()["categories"]
        for category in categories:
            category["expanded"] = self.explorer.is_expanded(category["key"])
        self.queue(
            ManifestMessage(
                categories=categories,
                expanded=list(self.explorer.expanded),
            ).as_dict()
        )

    async def _handle_toggle_category(self, payload: Dict[str, Any]) -> None:
        key = str(payload.get("category") or "")
        if self.deps.manifest.category(key) is None:
            self._queue_error("unknown_category", f"Catégorie inconnue: {key}")
            return
        self.explorer.toggle(key)
        self.queue(ExplorerMessage(expanded=list(self.explorer.expanded)).as_dict())

    async def _handle_lookup(self, payload: Dict[str, Any]) -> None:
        try:
            record = await self.deps.lookup.find_by_cin(str(payload.get("cin") or ""))
        except StudentLookupError as exc:
            self._queue_error(exc.code, str(exc))
            return
        self.queue(
            LookupMessage(student=record.model_dump(), destination=record.destination).as_dict()
        )

    async def _handle_navigate(self, payload: Dict[str, Any]) -> None:
        destination = payload.get("destination")
        label = payload.get("label")
        if destination is None and label is not None:
            destination = self.deps.manifest.find_destination(str(label))
            if destination is None:
                self._queue_error("unknown_destination", f"Lieu inconnu: {label}")
                return
        self.navigation.open(str(destination) if destination is not None else None)

    async def _handle_next(self, payload: Dict[str, Any]) -> None:  # noqa: ARG002
        session = self._require_session()
        if session is not None:
            session.advance()

    async def _handle_prev(self, payload: Dict[str, Any]) -> None:  # noqa: ARG002
        session = self._require_session()
        if session is not None:
            session.retreat()

    async def _handle_restart(self, payload: Dict[str, Any]) -> None:  # noqa: ARG002
        session = self._require_session()
        if session is not None:
            session.restart()

    async def _handle_asset_ready(self, payload: Dict[str, Any]) -> None:  # noqa: ARG002
        session = self._require_session()
        if session is not None:
            session.mark_asset_ready()

    async def _handle_leave(self, payload: Dict[str, Any]) -> None:  # noqa: ARG002
        self.navigation.leave()
        self.queue(NavigationMessage(session=None).as_dict())

    def _require_session(self) -> Optional[NavigationSession]:
        session = self.navigation.active
        if session is None:
            self._queue_error("no_session", "Aucun parcours en cours.")
        return session

    def _on_snapshot(self, snapshot: CursorSnapshot) -> None:
        self.queue(NavigationMessage(session=snapshot.as_dict()).as_dict())

    def _queue_error(self, code: str, message: str) -> None:
        self.queue(ErrorMessage(code=code, message=message).as_dict())

    async def _run_cleanup(self) -> None:
        for callback in self.deps.cleanup:
            if callback is None:
                continue
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.warning("Session cleanup callback failed.", exc_info=True)
