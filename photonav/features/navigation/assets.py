from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol

import httpx

from . import settings

logger = logging.getLogger(__name__)


class AssetSource(Protocol):
    """Backend that answers existence probes and warm loads for step images."""

    async def exists(self, path: str) -> bool: ...

    async def warm(self, path: str) -> None: ...

    async def aclose(self) -> None: ...


class HttpAssetSource:
    """Asset host reached over HTTP.

    ``exists`` issues a ``HEAD`` request (streamed ``GET`` when the host
    answers 405) and only accepts 2xx responses carrying an image content
    type, so an HTML fallback page served for unknown paths reads as absent.
    Transport errors map to ``False``.
    """

    def __init__(
        self,
        base_url: str = settings.ASSET_BASE_URL,
        *,
        client: Optional[httpx.AsyncClient] = None,
        probe_timeout: float = settings.PROBE_TIMEOUT_S,
        prefetch_timeout: float = settings.PREFETCH_TIMEOUT_S,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.probe_timeout = probe_timeout
        self.prefetch_timeout = prefetch_timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def exists(self, path: str) -> bool:
        url = self.url_for(path)
        try:
            response = await self._client.head(url, timeout=self.probe_timeout)
            if response.status_code == 405:
                async with self._client.stream("GET", url, timeout=self.probe_timeout) as streamed:
                    return self._is_image_response(streamed)
            return self._is_image_response(response)
        except httpx.HTTPError as exc:
            logger.debug("Probe failed for %s: %s", url, exc)
            return False

    async def warm(self, path: str) -> None:
        url = self.url_for(path)
        response = await self._client.get(url, timeout=self.prefetch_timeout)
        response.raise_for_status()
        logger.debug("Warmed %s (%d bytes)", url, len(response.content))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _is_image_response(response: httpx.Response) -> bool:
        if not response.is_success:
            return False
        content_type = response.headers.get("content-type")
        if content_type is None:
            return True
        return content_type.split(";", 1)[0].strip().lower().startswith("image/")


class LocalAssetSource:
    """Asset tree on the local filesystem (kiosk running off a mounted share)."""

    def __init__(self, root_dir: Path) -> None:
        self.root_dir = Path(root_dir)

    def resolve(self, path: str) -> Path:
        return self.root_dir / path

    async def exists(self, path: str) -> bool:
        target = self.resolve(path)
        try:
            return await asyncio.to_thread(target.is_file)
        except OSError as exc:
            logger.debug("Probe failed for %s: %s", target, exc)
            return False

    async def warm(self, path: str) -> None:
        target = self.resolve(path)
        data = await asyncio.to_thread(target.read_bytes)
        logger.debug("Warmed %s (%d bytes)", target, len(data))

    async def aclose(self) -> None:
        return None
