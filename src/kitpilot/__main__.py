"""Entry point: ``python -m kitpilot``."""

from __future__ import annotations

import argparse
import logging
import sys

from kitpilot.exceptions import KitPilotError, RecordNotFoundError
from kitpilot.history.store import JsonHistoryStore, import_legacy_csv
from kitpilot.history.tracker import PipelineTracker
from kitpilot.models import ApplicationRecord, OverallStatus, SortKey
from kitpilot.reporting.console import print_banner, print_history, print_record
from kitpilot.reporting.data_export import export_to_file
from kitpilot.settings import AppSettings


def _configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kitpilot", description="Track job applications.")
    parser.add_argument("--config", help="path to settings.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="show tracked applications")
    p.add_argument("--sort", choices=[k.value for k in SortKey])

    p = sub.add_parser("show", help="show one application's stage timeline")
    p.add_argument("id")

    p = sub.add_parser("status", help="set an application's overall status")
    p.add_argument("id")
    p.add_argument("status", choices=[s.value for s in OverallStatus])

    p = sub.add_parser("stage", help="make a stage current (0-based index)")
    p.add_argument("id")
    p.add_argument("index", type=int)

    p = sub.add_parser("add-stage", help="append a custom stage")
    p.add_argument("id")
    p.add_argument("label")

    p = sub.add_parser("delete", help="delete a rejected application")
    p.add_argument("id")

    p = sub.add_parser("export", help="export the history")
    p.add_argument("--format", choices=["json", "csv"], default="json")
    p.add_argument("--out", help="output directory")

    sub.add_parser("import-legacy", help="import the old applications.csv history")
    return parser


def _require(tracker: PipelineTracker, record_id: str) -> ApplicationRecord:
    record = tracker.get(record_id)
    if record is None:
        raise RecordNotFoundError(f"No application with id {record_id!r}.")
    return record


def run(args: argparse.Namespace, settings: AppSettings) -> None:
    store = JsonHistoryStore(settings.history_path)

    if args.command == "import-legacy":
        count = import_legacy_csv(settings.legacy_history_path, store)
        print(f"Imported {count} application(s).")
        return

    tracker = PipelineTracker(store)
    tracker.load()

    if args.command == "list":
        print_banner()
        print_history(tracker.sorted(args.sort or settings.default_sort))
    elif args.command == "show":
        print_record(_require(tracker, args.id))
    elif args.command == "status":
        record = _require(tracker, args.id)
        tracker.set_overall_status(record, args.status)
        print_record(record)
    elif args.command == "stage":
        record = _require(tracker, args.id)
        tracker.set_stage_current(record, args.index)
        print_record(record)
    elif args.command == "add-stage":
        record = _require(tracker, args.id)
        if tracker.add_stage(record, args.label) is None:
            print("Stage label is empty; nothing added.")
        print_record(record)
    elif args.command == "delete":
        tracker.delete_rejected(args.id)
        print(f"Deleted {args.id}.")
    elif args.command == "export":
        dest = export_to_file(
            tracker.sorted(settings.default_sort),
            args.out or settings.export_path,
            args.format,
        )
        print(f"Wrote {dest}")


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    try:
        settings = AppSettings.from_yaml(args.config)
    except KitPilotError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    _configure_logging(settings.log_level)
    try:
        run(args, settings)
    except KitPilotError as exc:
        logging.error("%s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
        sys.exit(130)


if __name__ == "__main__":
    main()
