from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from photonav.features.lookup.client import DEFAULT_TABLE, DEFAULT_TIMEOUT_S
from photonav.features.navigation import settings as navigation_settings

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"
DEFAULT_ASSET_DIR = PROJECT_ROOT / "public"
DEFAULT_MANIFEST = DEFAULT_ASSET_DIR / "structure.json"

_FALSE_VALUES = {"false", "0", "no", "off"}


@dataclass(slots=True)
class WebSocketConfig:
    host: str = "0.0.0.0"
    port: int = 8765


@dataclass(slots=True)
class AssetConfig:
    backend: str
    base_url: str
    root_dir: Path
    asset_root: str
    image_suffix: str
    max_probes: int
    probe_timeout: float
    prefetch_timeout: float
    prefetch_enabled: bool


@dataclass(slots=True)
class LookupConfig:
    base_url: Optional[str]
    api_key: Optional[str]
    table: str
    timeout: float


@dataclass(slots=True)
class ManifestConfig:
    location: str
    timeout: float


@dataclass(slots=True)
class AppConfig:
    websocket: WebSocketConfig
    assets: AssetConfig
    lookup: LookupConfig
    manifest: ManifestConfig
    log_level: str = "INFO"


def _load_env() -> None:
    if ENV_PATH.exists():
        load_dotenv(ENV_PATH)
    else:
        load_dotenv()


def _get_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return float(default)
    try:
        return float(value)
    except ValueError:
        return float(default)


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return int(default)
    try:
        return int(value)
    except ValueError:
        return int(default)


def _get_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in _FALSE_VALUES


def load_config() -> AppConfig:
    """Load configuration from environment variables (and ``.env``)."""
    _load_env()

    ws_host = os.getenv("PHOTONAV_WS_HOST", "0.0.0.0")
    ws_port = _get_int_env("PHOTONAV_WS_PORT", 8765)

    max_probes = _get_int_env("PHOTONAV_MAX_STEPS", navigation_settings.MAX_PROBES)
    if not 0 < max_probes <= navigation_settings.MAX_PROBES:
        max_probes = navigation_settings.MAX_PROBES

    assets = AssetConfig(
        backend=os.getenv("PHOTONAV_ASSET_BACKEND", "http").strip().lower(),
        base_url=os.getenv("PHOTONAV_ASSET_BASE_URL", navigation_settings.ASSET_BASE_URL),
        root_dir=Path(os.getenv("PHOTONAV_ASSET_DIR", str(DEFAULT_ASSET_DIR))),
        asset_root=os.getenv("PHOTONAV_ASSET_ROOT", navigation_settings.ASSET_ROOT),
        image_suffix=os.getenv("PHOTONAV_IMAGE_SUFFIX", navigation_settings.IMAGE_SUFFIX),
        max_probes=max_probes,
        probe_timeout=_get_float_env("PHOTONAV_PROBE_TIMEOUT", navigation_settings.PROBE_TIMEOUT_S),
        prefetch_timeout=_get_float_env(
            "PHOTONAV_PREFETCH_TIMEOUT", navigation_settings.PREFETCH_TIMEOUT_S
        ),
        prefetch_enabled=_get_bool_env("PHOTONAV_PREFETCH", navigation_settings.PREFETCH_ENABLED),
    )

    lookup = LookupConfig(
        base_url=os.getenv("SUPABASE_URL") or None,
        api_key=os.getenv("SUPABASE_API_KEY") or None,
        table=os.getenv("PHOTONAV_LOOKUP_TABLE", DEFAULT_TABLE),
        timeout=_get_float_env("PHOTONAV_LOOKUP_TIMEOUT", DEFAULT_TIMEOUT_S),
    )

    manifest = ManifestConfig(
        location=os.getenv("PHOTONAV_MANIFEST", str(DEFAULT_MANIFEST)),
        timeout=_get_float_env("PHOTONAV_MANIFEST_TIMEOUT", 10.0),
    )

    log_level = os.getenv("PHOTONAV_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = "INFO"

    return AppConfig(
        websocket=WebSocketConfig(host=ws_host, port=ws_port),
        assets=assets,
        lookup=lookup,
        manifest=manifest,
        log_level=log_level,
    )
