from .manifest import (
    Category,
    CategoryManifest,
    ExplorerState,
    ManifestEntry,
    ManifestError,
    category_icon,
    category_title,
    destination_from_path,
    load_manifest,
)

__all__ = [
    "Category",
    "CategoryManifest",
    "ExplorerState",
    "ManifestEntry",
    "ManifestError",
    "category_icon",
    "category_title",
    "destination_from_path",
    "load_manifest",
]
