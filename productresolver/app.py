import argparse
import json
from pathlib import Path
from typing import Any, Optional

from . import __version__
from .cache import LocalCache
from .config import ResolverSettings
from .env import load_env
from .fetcher import RetryingFetcher
from .logger import get_logger
from .normalize import EntityNormalizer
from .orchestrator import ResolutionCallbacks, ResolutionOrchestrator
from .schema import Entity
from .sources import PreloadedSource, SourceRegistry
from .storage import KeyValueStore, open_store


def build_orchestrator(
    settings: ResolverSettings,
    store: Optional[KeyValueStore] = None,
    session=None,
    preloaded: Any = None,
) -> ResolutionOrchestrator:
    """Wire the default pipeline: registry of live sources, cache and fallbacks."""
    normalizer = EntityNormalizer()
    cache = LocalCache(store if store is not None else open_store(settings.cache_path), normalizer)
    fetcher = RetryingFetcher(session=session)
    registry = SourceRegistry(settings, fetcher, cache, preloaded=PreloadedSource(preloaded))
    return ResolutionOrchestrator(registry, cache, normalizer)


def _load_json(path: Path) -> Any:
    if not path.exists():
        raise SystemExit(f"Input file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _print_entity(entity: Entity) -> None:
    print(f"ID: {entity.id}")
    print(f"  Name: {entity.name}")
    print(f"  Category: {entity.category.name} ({entity.category.slug})")
    if entity.discount_price is not None and entity.discount_price < entity.price:
        print(f"  Price: {entity.discount_price} (was {entity.price})")
    else:
        print(f"  Price: {entity.price}")
    print(f"  Stock: {entity.stock}")
    print(f"  Rating: {entity.ratings_average} ({entity.review_count} reviews)")
    print(f"  Images: {len(entity.images)}")


def cmd_resolve(args: argparse.Namespace) -> None:
    settings = ResolverSettings.from_env()
    if args.cache:
        settings.cache_path = Path(args.cache)
    if args.skip_network:
        settings.skip_network = True
    preloaded = _load_json(Path(args.preloaded)) if args.preloaded else None

    orchestrator = build_orchestrator(settings, preloaded=preloaded)
    outcome = {}

    def on_resolved(entity: Entity, source_label: str) -> None:
        outcome["entity"] = entity
        outcome["source"] = source_label

    def on_degraded(reason: str) -> None:
        outcome["degraded"] = reason

    def on_failed(reason: str) -> None:
        outcome["failed"] = reason

    orchestrator.resolve(args.id, ResolutionCallbacks(on_resolved, on_degraded, on_failed))

    if "failed" in outcome:
        raise SystemExit(f"Failed: {outcome['failed']}")
    if "entity" not in outcome:
        raise SystemExit("Provide a non-empty product id.")

    if args.json:
        print(json.dumps(outcome["entity"].to_dict(), indent=2, ensure_ascii=False))
    else:
        print(f"Source: {outcome['source']}")
        _print_entity(outcome["entity"])
    if "degraded" in outcome:
        print(f"[notice] {outcome['degraded']}")


def cmd_normalize(args: argparse.Namespace) -> None:
    raw = _load_json(Path(args.input))
    entity = EntityNormalizer().normalize(raw, args.id or "")
    if entity is None:
        print("Unrecognized payload: no product object with an id")
        raise SystemExit(2)
    print(json.dumps(entity.to_dict(), indent=2, ensure_ascii=False))


def cmd_cache_show(args: argparse.Namespace) -> None:
    settings = ResolverSettings.from_env()
    path = Path(args.cache) if args.cache else settings.cache_path
    record = LocalCache(open_store(path)).get(args.id)
    if record is None:
        print(f"No cached record for {args.id}")
        return
    print(f"Cached at: {record.cached_at.isoformat()}")
    _print_entity(record.entity)


def main(argv=None):
    load_env()
    parser = argparse.ArgumentParser(prog="productresolver", description="Resilient product resolution")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    res = subparsers.add_parser("resolve", help="Resolve a product id through every source until one succeeds")
    res.add_argument("--id", required=True, help="Product id")
    res.add_argument("--skip-network", action="store_true", help="Serve a cached record before trying the network")
    res.add_argument("--preloaded", help="JSON file with preloaded product data (used once)")
    res.add_argument("--cache", help="Cache path (.json or .db); default from RESOLVER_CACHE_PATH")
    res.add_argument("--json", action="store_true", help="Print the resolved product as JSON")
    res.set_defaults(func=cmd_resolve)

    nrm = subparsers.add_parser("normalize", help="Normalize a saved API response")
    nrm.add_argument("--input", required=True, help="Path to response JSON")
    nrm.add_argument("--id", help="Requested product id (for diagnostics)")
    nrm.set_defaults(func=cmd_normalize)

    cch = subparsers.add_parser("cache-show", help="Show the cached record for a product id")
    cch.add_argument("--id", required=True, help="Product id")
    cch.add_argument("--cache", help="Cache path (.json or .db)")
    cch.set_defaults(func=cmd_cache_show)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    get_logger().set_level(ResolverSettings.from_env().log_level)

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
