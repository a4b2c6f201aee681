from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .labels import merge_custom_labels
from .objects import merge_object_folders
from .project import (
    DxMergerError,
    load_package_directories,
    prepare_default_package,
    resolve_project,
)
from .reporting import summarize_cli, write_run_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dx-merger",
        description="Merge project package directories into the default package.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    fix_parser = subparsers.add_parser(
        "fix",
        help="Merge object folders and custom labels into the default package.",
    )
    _add_fix_arguments(fix_parser)
    return parser


def _add_fix_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project",
        type=Path,
        help="Directory inside the project (defaults to the current directory).",
    )
    parser.add_argument(
        "--dedup-scope",
        choices=["run", "file"],
        default="run",
        help=(
            "Keep the first definition of a label across the whole run (default) "
            "or only within each label file (legacy behaviour)."
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Describe the actions without mutating the filesystem.",
    )
    parser.add_argument(
        "--report",
        type=Path,
        help="Write a JSON report of the merge results to this path.",
    )


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def run(args: argparse.Namespace) -> int:
    configure_logging(args.verbose)
    logging.debug("Arguments: %s", args)

    if args.command == "fix":
        _run_fix(args)
        return 0
    raise DxMergerError(f"Unknown command: {args.command}")


def _run_fix(args: argparse.Namespace) -> None:
    root = resolve_project(args.project)
    logging.info("Project path %s", root)
    packages = load_package_directories(root)

    paths = prepare_default_package(root, dry_run=args.dry_run)
    object_results = merge_object_folders(
        root,
        packages,
        paths.objects,
        dry_run=args.dry_run,
    )
    label_result = merge_custom_labels(
        root,
        paths.labels_file,
        dedup_scope=args.dedup_scope,
        dry_run=args.dry_run,
    )

    logging.info("\n%s", summarize_cli(object_results, label_result))
    if args.report:
        if args.dry_run:
            logging.info("Dry run: report not written.")
        else:
            write_run_report(args.report, object_results, label_result)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except DxMergerError as exc:
        logging.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        logging.error("Interrupted")
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
