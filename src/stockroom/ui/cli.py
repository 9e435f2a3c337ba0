# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, cast

from dotenv import load_dotenv

from stockroom.app import (
    build_catalog,
    close_catalog,
    load_records,
    seed_if_empty,
    startup_sweep,
)
from stockroom.config import configure_logging
from stockroom.domain.errors import BatchPartialFailureError, ValidationError
from stockroom.domain.model import ENTITY_KINDS, get_entity_kind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from stockroom.domain.catalog import CatalogService
    from stockroom.domain.model import EntityKind, Record

log = logging.getLogger(__name__)

type Payload = dict[str, object] | list[dict[str, object]] | None


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage Stockroom catalog records")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)
    kinds = sorted(ENTITY_KINDS)

    listing = subparsers.add_parser("list", help="Print every record of a kind as JSON")
    listing.add_argument("kind", choices=kinds)

    get = subparsers.add_parser("get", help="Print one record as JSON")
    get.add_argument("kind", choices=kinds)
    get.add_argument("record_id")

    add = subparsers.add_parser("add", help="Add one record")
    add.add_argument("kind", choices=kinds)
    add.add_argument("data", help="JSON object with the record's fields, including 'codigo'")

    update = subparsers.add_parser("update", help="Merge fields into an existing record")
    update.add_argument("kind", choices=kinds)
    update.add_argument("record_id")
    update.add_argument("data", help="JSON object with the fields to overwrite")

    remove = subparsers.add_parser("delete", help="Delete one record")
    remove.add_argument("kind", choices=kinds)
    remove.add_argument("record_id")

    bulk = subparsers.add_parser("import", help="Insert records whose natural keys are new")
    bulk.add_argument("kind", choices=kinds)
    bulk.add_argument("path", type=Path, help="JSON array or JSON Lines file")

    reconcile = subparsers.add_parser("reconcile", help="Collapse duplicate natural keys")
    reconcile.add_argument("kind", choices=kinds)

    sweep = subparsers.add_parser(
        "sweep", help="Reconcile every kind (or the given ones) that has duplicates"
    )
    sweep.add_argument("kinds", nargs="*", metavar="kind", help=f"One of: {', '.join(kinds)}")

    seed = subparsers.add_parser("seed", help="Import starter data into an empty collection")
    seed.add_argument("kind", choices=kinds)
    seed.add_argument("path", type=Path, help="JSON array or JSON Lines file")

    clear = subparsers.add_parser("clear", help="Delete every record of a kind")
    clear.add_argument("kind", choices=kinds)
    clear.add_argument("--yes", action="store_true", help="Confirm the deletion")

    return parser.parse_args(list(argv))


def _parse_json_object(value: str) -> dict[str, object]:
    try:
        loaded: object = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON payload: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ValueError("Payload must be a JSON object")
    return cast("dict[str, object]", loaded)


def _load_payload(args: argparse.Namespace) -> Payload:
    if args.command == "sweep":
        unknown = [name for name in args.kinds if name not in ENTITY_KINDS]
        if unknown:
            raise ValueError(f"Unknown entity kinds: {', '.join(unknown)}")
    if args.command in {"add", "update"}:
        return _parse_json_object(args.data)
    if args.command in {"import", "seed"}:
        return load_records(args.path)
    if args.command == "clear" and not args.yes:
        raise ValueError("Refusing to clear records without --yes")
    return None


def _dump(kind: EntityKind, records: Sequence[Record]) -> str:
    return json.dumps([kind.record_to_mapping(record) for record in records], indent=2)


def _run(catalog: CatalogService, args: argparse.Namespace, payload: Payload) -> None:
    if args.command == "sweep":
        kinds = [get_entity_kind(name) for name in args.kinds] or None
        for name, result in startup_sweep(catalog, kinds).items():
            summary = "no duplicates" if result is None else f"removed={result.removed}"
            print(f"{name}: {summary}")
        return

    kind = get_entity_kind(args.kind)
    match args.command:
        case "list":
            print(_dump(kind, catalog.get_all(kind)))
        case "get":
            print(json.dumps(kind.record_to_mapping(catalog.get(kind, args.record_id)), indent=2))
        case "add":
            print(catalog.add(kind, cast("dict[str, object]", payload)))
        case "update":
            catalog.update(kind, args.record_id, cast("dict[str, object]", payload))
        case "delete":
            catalog.delete(kind, args.record_id)
        case "import":
            result = catalog.bulk_import(kind, cast("list[dict[str, object]]", payload))
            print(f"inserted={result.inserted} skipped={result.skipped} failed={result.failed}")
        case "seed":
            seeded = seed_if_empty(catalog, kind, cast("list[dict[str, object]]", payload))
            if seeded is None:
                print(f"{kind.name} already holds records")
            else:
                print(f"inserted={seeded.inserted} skipped={seeded.skipped}")
        case "reconcile":
            outcome = catalog.reconcile(kind)
            print(f"removed={outcome.removed} kept={outcome.kept}")
        case "clear":
            print(f"deleted={catalog.clear_all(kind)}")
        case _:
            raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else None)
    try:
        payload = _load_payload(parsed_args)
    except (OSError, ValueError):
        log.exception("CLI validation error")
        sys.exit(2)

    catalog: CatalogService | None = None
    try:
        catalog = build_catalog()
        _run(catalog, parsed_args, payload)
    except ValidationError:
        log.exception("Rejected %s request", parsed_args.command)
        sys.exit(2)
    except BatchPartialFailureError as exc:
        for failure in exc.result.failures:
            log.error("Record #%s (%s): %s", failure.index, failure.natural_key, failure.message)
        log.error("%s", exc)
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)
    finally:
        if catalog is not None:
            close_catalog(catalog)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
