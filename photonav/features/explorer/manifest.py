from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

logger = logging.getLogger(__name__)

CATEGORY_TITLES: Dict[str, str] = {
    "espaces_pedagogiques": "Espaces Pédagogiques",
    "departements": "Départements",
    "laboratoires_et_ateliers": "Laboratoires et Ateliers",
}

# (substring, icon) checked in order
CATEGORY_ICONS: Tuple[Tuple[str, str], ...] = (
    ("pedagogique", "🎓"),
    ("departement", "🏛️"),
    ("laboratoire", "🔬"),
)
DEFAULT_ICON = "📍"


class ManifestError(Exception):
    """The category manifest could not be read or has the wrong shape."""


def category_title(key: str) -> str:
    return CATEGORY_TITLES.get(key, key)


def category_icon(key: str) -> str:
    for needle, icon in CATEGORY_ICONS:
        if needle in key:
            return icon
    return DEFAULT_ICON


def destination_from_path(resource_path: str) -> str:
    """Last path segment of a manifest resource path.

    Display labels may carry accents or spaces, so the folder name is what
    identifies the destination.
    """
    segments = [segment for segment in resource_path.strip().split("/") if segment]
    if not segments:
        raise ManifestError(f"Chemin de ressource vide: {resource_path!r}")
    return segments[-1]


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    label: str
    resource_path: str
    destination: str

    def as_dict(self) -> Dict[str, str]:
        return {
            "label": self.label,
            "resourcePath": self.resource_path,
            "destination": self.destination,
        }


@dataclass(frozen=True, slots=True)
class Category:
    key: str
    entries: Tuple[ManifestEntry, ...]

    @property
    def title(self) -> str:
        return category_title(self.key)

    @property
    def icon(self) -> str:
        return category_icon(self.key)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "icon": self.icon,
            "count": len(self.entries),
            "entries": [entry.as_dict() for entry in self.entries],
        }


@dataclass(frozen=True, slots=True)
class CategoryManifest:
    categories: Tuple[Category, ...] = ()

    @classmethod
    def from_dict(cls, payload: Any) -> CategoryManifest:
        if not isinstance(payload, dict):
            raise ManifestError("Le manifeste doit être un objet JSON.")
        categories: List[Category] = []
        for key, locations in payload.items():
            if not isinstance(locations, dict):
                raise ManifestError(f"La catégorie {key!r} doit être un objet JSON.")
            entries: List[ManifestEntry] = []
            for label, resource_path in locations.items():
                if not isinstance(resource_path, str):
                    raise ManifestError(f"Chemin invalide pour {label!r} dans {key!r}.")
                entries.append(
                    ManifestEntry(
                        label=str(label),
                        resource_path=resource_path,
                        destination=destination_from_path(resource_path),
                    )
                )
            categories.append(Category(key=str(key), entries=tuple(entries)))
        return cls(categories=tuple(categories))

    def category(self, key: str) -> Optional[Category]:
        for category in self.categories:
            if category.key == key:
                return category
        return None

    def find_destination(self, label: str) -> Optional[str]:
        for category in self.categories:
            for entry in category.entries:
                if entry.label == label:
                    return entry.destination
        return None

    def as_dict(self) -> Dict[str, Any]:
        return {"categories": [category.as_dict() for category in self.categories]}


async def load_manifest(
    location: Union[str, Path],
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 10.0,
) -> CategoryManifest:
    """Read ``structure.json`` from a file path or an http(s) URL."""
    text = str(location)
    if text.startswith(("http://", "https://")):
        payload = await _fetch_json(text, client=client, timeout=timeout)
    else:
        path = Path(location)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ManifestError(f"Manifeste introuvable: {path}") from exc
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestError(f"Manifeste illisible: {path}") from exc
    manifest = CategoryManifest.from_dict(payload)
    logger.info("Loaded manifest with %d categories from %s", len(manifest.categories), text)
    return manifest


async def _fetch_json(url: str, *, client: Optional[httpx.AsyncClient], timeout: float) -> Any:
    owns_client = client is None
    http = client or httpx.AsyncClient(follow_redirects=True)
    try:
        response = await http.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as exc:
        raise ManifestError(f"Manifeste indisponible: {exc}") from exc
    except ValueError as exc:
        raise ManifestError(f"Manifeste illisible: {url}") from exc
    finally:
        if owns_client:
            await http.aclose()


@dataclass(slots=True)
class ExplorerState:
    """Expanded/collapsed categories of one explorer screen."""

    expanded: List[str] = field(default_factory=list)

    def toggle(self, key: str) -> bool:
        if key in self.expanded:
            self.expanded.remove(key)
            return False
        self.expanded.append(key)
        return True

    def is_expanded(self, key: str) -> bool:
        return key in self.expanded
