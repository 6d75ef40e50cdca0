from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from photonav.app.application import Application, RuntimeOverrides
from photonav.features.explorer import CategoryManifest, ManifestError, load_manifest
from photonav.features.lookup import StudentLookupError
from photonav.features.navigation import DestinationMissingError, StepSequence


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Photo navigation developer CLI")
    parser.add_argument("--discover", metavar="DEST", help="Probe the published steps of a destination")
    parser.add_argument("--lookup", metavar="CIN", help="Resolve a CIN to its exam room")
    parser.add_argument("--manifest", action="store_true", help="Print the category manifest")
    parser.add_argument("--local", metavar="DIR", type=Path, help="Probe a local asset directory instead of HTTP")
    parser.add_argument("--manifest-location", help="Manifest path or URL override")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every probe")
    return parser


def _print_sequence(sequence: StepSequence) -> None:
    print(f"Destination: {sequence.destination}")
    if sequence.is_empty:
        print(f"Aucun parcours n'a été trouvé pour \"{sequence.destination}\".")
        return
    print(f"Steps: {len(sequence)}")
    for step in sequence:
        print(f"  {step.index}. {step.path}")


def _print_manifest(manifest: CategoryManifest) -> None:
    if not manifest.categories:
        print("Manifest is empty.")
        return
    for category in manifest.categories:
        print(f"{category.icon} {category.title} ({len(category.entries)} lieux disponibles)")
        for entry in category.entries:
            print(f"  - {entry.label} -> {entry.destination}")


async def _run(args: argparse.Namespace) -> int:
    overrides = RuntimeOverrides(
        asset_backend="local" if args.local else None,
        asset_dir=args.local,
        manifest_location=args.manifest_location,
    )
    application = Application(overrides=overrides)
    deps = application.create_dependencies()
    status = 0
    try:
        if args.manifest:
            location = args.manifest_location or application.config.manifest.location
            try:
                _print_manifest(await load_manifest(location))
            except ManifestError as exc:
                print(f"Manifest error: {exc}", file=sys.stderr)
                status = 1
        if args.lookup is not None:
            try:
                record = await deps.lookup.find_by_cin(args.lookup)
            except StudentLookupError as exc:
                print(f"Lookup failed: {exc}", file=sys.stderr)
                status = 1
            else:
                print(f"{record.full_name} ({record.cin}) -> salle {record.salle}")
                if args.discover is None:
                    _print_sequence(await deps.discoverer.discover(record.destination))
        if args.discover is not None:
            try:
                _print_sequence(await deps.discoverer.discover(args.discover))
            except DestinationMissingError as exc:
                print(str(exc), file=sys.stderr)
                status = 1
    finally:
        for callback in deps.cleanup:
            result = callback()
            if result is not None:
                await result
    return status


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not (args.discover is not None or args.lookup is not None or args.manifest):
        parser.error("Choose at least one of --discover, --lookup or --manifest.")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(asctime)s] %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
