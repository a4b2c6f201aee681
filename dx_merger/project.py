from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

MANIFEST_NAME = "sfdx-project.json"
DEFAULT_PACKAGE = "default"
LABELS_FILE_NAME = "CustomLabels.labels-meta.xml"


class DxMergerError(Exception):
    """Base exception for project resolution and merge errors."""


@dataclass(frozen=True)
class PackageDirectory:
    path: str

    @property
    def is_default(self) -> bool:
        return self.path == DEFAULT_PACKAGE


@dataclass(frozen=True)
class ProjectPaths:
    root: Path
    default: Path
    objects: Path
    labels: Path
    labels_file: Path


def resolve_project(start: Optional[Path] = None) -> Path:
    start = (start or Path.cwd()).expanduser().resolve()
    for candidate in [start, *start.parents]:
        if (candidate / MANIFEST_NAME).is_file():
            return candidate
    raise DxMergerError(
        f"No {MANIFEST_NAME} found in {start} or any parent directory; "
        "this command must run inside a project."
    )


def load_package_directories(root: Path) -> List[PackageDirectory]:
    manifest_path = root / MANIFEST_NAME
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise DxMergerError(f"Project manifest not found: {manifest_path}") from exc
    except json.JSONDecodeError as exc:
        raise DxMergerError(f"Invalid JSON in {manifest_path}: {exc}") from exc

    entries = data.get("packageDirectories") if isinstance(data, dict) else None
    if not entries:
        raise DxMergerError(f"{manifest_path} declares no packageDirectories")

    packages: List[PackageDirectory] = []
    for entry in entries:
        path = entry.get("path") if isinstance(entry, dict) else None
        if isinstance(path, str):
            path = path.strip().strip("/")
        if not isinstance(path, str) or path in ("", "."):
            raise DxMergerError(f"Package directory entry without a usable path: {entry!r}")
        packages.append(PackageDirectory(path=path))
    return packages


def project_paths(root: Path) -> ProjectPaths:
    default_dir = root / DEFAULT_PACKAGE
    labels_dir = default_dir / "labels"
    return ProjectPaths(
        root=root,
        default=default_dir,
        objects=default_dir / "objects",
        labels=labels_dir,
        labels_file=labels_dir / LABELS_FILE_NAME,
    )


def prepare_default_package(root: Path, *, dry_run: bool = False) -> ProjectPaths:
    paths = project_paths(root)

    logging.info("Clearing default package...")
    if paths.default.exists():
        if dry_run:
            logging.info("Dry run: would remove %s", paths.default)
        elif paths.default.is_dir() and not paths.default.is_symlink():
            shutil.rmtree(paths.default)
        else:
            paths.default.unlink()

    logging.info("Creating directories...")
    for path in [paths.default, paths.objects, paths.labels]:
        if dry_run:
            logging.info("Dry run: would create directory %s", path)
        else:
            path.mkdir(parents=True, exist_ok=True)
    return paths
