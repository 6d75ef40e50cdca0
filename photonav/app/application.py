from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Tuple

import httpx

from photonav.app.config import AppConfig, load_config
from photonav.features.explorer import CategoryManifest, ManifestError, load_manifest
from photonav.features.lookup import StudentLookupClient
from photonav.features.navigation import (
    AssetSource,
    HttpAssetSource,
    LocalAssetSource,
    SequenceDiscoverer,
)

if TYPE_CHECKING:
    from photonav.websocket.session import ClientSession, Connection

logger = logging.getLogger(__name__)

CleanupCallback = Callable[[], Awaitable[None] | None]


@dataclass(slots=True)
class RuntimeOverrides:
    asset_backend: Optional[str] = None
    asset_dir: Optional[Path] = None
    manifest_location: Optional[str] = None


@dataclass(slots=True)
class SessionDependencies:
    config: AppConfig
    assets: AssetSource
    discoverer: SequenceDiscoverer
    lookup: StudentLookupClient
    manifest: CategoryManifest
    cleanup: Tuple[CleanupCallback, ...]


class Application:
    """Holds configuration and the shared manifest; builds per-client sessions."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        overrides: Optional[RuntimeOverrides] = None,
    ) -> None:
        self.config = config or load_config()
        self.overrides = overrides or RuntimeOverrides()
        self.manifest = CategoryManifest()

    async def startup(self) -> None:
        location = self.overrides.manifest_location or self.config.manifest.location
        try:
            self.manifest = await load_manifest(location, timeout=self.config.manifest.timeout)
        except ManifestError as exc:
            logger.warning("Category manifest unavailable, serving an empty one: %s", exc)
            self.manifest = CategoryManifest()

    async def shutdown(self) -> None:
        self.manifest = CategoryManifest()
        logger.info("Application shut down")

    def create_dependencies(self) -> SessionDependencies:
        cleanup_callbacks: list[CleanupCallback] = []
        http_client = httpx.AsyncClient(follow_redirects=True)
        cleanup_callbacks.append(http_client.aclose)

        assets = self._create_assets(http_client)
        asset_cfg = self.config.assets
        discoverer = SequenceDiscoverer(
            assets,
            max_probes=asset_cfg.max_probes,
            asset_root=asset_cfg.asset_root,
            image_suffix=asset_cfg.image_suffix,
        )
        lookup_cfg = self.config.lookup
        lookup = StudentLookupClient(
            lookup_cfg.base_url,
            lookup_cfg.api_key,
            table=lookup_cfg.table,
            timeout=lookup_cfg.timeout,
            client=http_client,
        )
        if not lookup.is_configured:
            logger.info("Student lookup is not configured (SUPABASE_URL / SUPABASE_API_KEY)")

        return SessionDependencies(
            config=self.config,
            assets=assets,
            discoverer=discoverer,
            lookup=lookup,
            manifest=self.manifest,
            cleanup=tuple(cleanup_callbacks),
        )

    def create_session(self, connection: "Connection") -> "ClientSession":
        from photonav.websocket.session import ClientSession

        return ClientSession(connection, self.create_dependencies())

    def _create_assets(self, http_client: httpx.AsyncClient) -> AssetSource:
        asset_cfg = self.config.assets
        backend = (self.overrides.asset_backend or asset_cfg.backend).lower()
        if backend == "http":
            return HttpAssetSource(
                asset_cfg.base_url,
                client=http_client,
                probe_timeout=asset_cfg.probe_timeout,
                prefetch_timeout=asset_cfg.prefetch_timeout,
            )
        if backend == "local":
            root_dir = self.overrides.asset_dir or asset_cfg.root_dir
            if not root_dir.is_dir():
                logger.warning("Asset directory %s does not exist; every route will be empty", root_dir)
            return LocalAssetSource(root_dir)
        raise ValueError(f"Unsupported asset backend: {backend}")
