from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Sequence

from .project import PackageDirectory

OBJECTS_DIR_NAME = "objects"
FIELDS_DIR_NAME = "fields"


@dataclass
class ObjectMergeResult:
    package: str
    status: str
    source: str | None = None
    files: int = 0
    message: str = ""


def merge_object_folders(
    root: Path,
    packages: Sequence[PackageDirectory],
    destination: Path,
    *,
    dry_run: bool = False,
) -> List[ObjectMergeResult]:
    logging.info("Merging directories...")
    logging.info("Packages: %s", ", ".join(package.path for package in packages))

    results: List[ObjectMergeResult] = []
    for package in packages:
        if package.is_default:
            continue
        result = _merge_single(root / package.path, package, destination, dry_run=dry_run)
        results.append(result)
    return results


def _merge_single(
    package_dir: Path,
    package: PackageDirectory,
    destination: Path,
    *,
    dry_run: bool,
) -> ObjectMergeResult:
    if not package_dir.is_dir():
        logging.error("Package directory %s does not exist; skipping.", package_dir)
        return ObjectMergeResult(
            package=package.path,
            status="missing",
            message=f"Package directory not found: {package_dir}",
        )

    folders = [
        folder for folder in find_object_folders(package_dir) if not _within(folder, destination)
    ]
    if not folders:
        logging.info("No object folder with fields found in %s", package_dir)
        return ObjectMergeResult(
            package=package.path,
            status="skipped",
            message="No valid object folder.",
        )

    source = folders[0]
    if len(folders) > 1:
        logging.debug("Ignoring %d additional object folder(s) in %s", len(folders) - 1, package_dir)

    if dry_run:
        logging.info("Dry run: would merge %s to %s", source, destination)
        return ObjectMergeResult(package=package.path, status="dry-run", source=str(source))

    logging.info("Merging %s to %s", source, destination)
    try:
        copied = _overlay_tree(source, destination)
    except OSError as exc:
        logging.error("Failed to merge %s: %s", source, exc)
        return ObjectMergeResult(
            package=package.path,
            status="error",
            source=str(source),
            message=str(exc),
        )
    return ObjectMergeResult(
        package=package.path,
        status="merged",
        source=str(source),
        files=copied,
    )


def find_object_folders(package_dir: Path) -> List[Path]:
    return [
        path
        for path in _walk_dirs(package_dir)
        if path.name == OBJECTS_DIR_NAME and is_valid_object_folder(path)
    ]


def is_valid_object_folder(path: Path) -> bool:
    return any(candidate.name == FIELDS_DIR_NAME for candidate in _walk_dirs(path))


def _walk_dirs(root: Path) -> Iterator[Path]:
    for current, dirnames, _ in os.walk(root):
        dirnames.sort()
        if current != str(root):
            yield Path(current)


def _overlay_tree(source: Path, destination: Path) -> int:
    copied = 0
    for item in sorted(source.rglob("*")):
        target = destination / item.relative_to(source)
        if item.is_dir():
            if target.exists() and not target.is_dir():
                target.unlink()
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.is_dir():
            shutil.rmtree(target)
        shutil.copy2(item, target)
        copied += 1
    return copied


def _within(path: Path, parent: Path) -> bool:
    resolved = path.resolve()
    target = parent.resolve()
    return resolved == target or target in resolved.parents
