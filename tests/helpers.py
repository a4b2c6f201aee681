from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Sequence

LABELS_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<CustomLabels xmlns="http://soap.sforce.com/2006/04/metadata">\n'
)


def write_manifest(root: Path, package_paths: Sequence[str]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    manifest = root / "sfdx-project.json"
    manifest.write_text(
        json.dumps(
            {
                "packageDirectories": [{"path": path} for path in package_paths],
                "sourceApiVersion": "58.0",
            }
        )
    )
    return manifest


def write_object(package_dir: Path, object_name: str, content: str) -> Path:
    object_dir = package_dir / "main" / "default" / "objects" / object_name
    (object_dir / "fields").mkdir(parents=True, exist_ok=True)
    meta = object_dir / f"{object_name}.object-meta.xml"
    meta.write_text(content)
    return meta


def label_xml(labels: Iterable[tuple[str, str]]) -> str:
    body = []
    for name, value in labels:
        body.append(
            "    <labels>\n"
            f"        <fullName>{name}</fullName>\n"
            "        <language>en_US</language>\n"
            "        <protected>false</protected>\n"
            f"        <shortDescription>{name} label</shortDescription>\n"
            f"        <value>{value}</value>\n"
            "    </labels>\n"
        )
    return LABELS_HEADER + "".join(body) + "</CustomLabels>\n"


def write_labels(package_dir: Path, labels: Iterable[tuple[str, str]]) -> Path:
    labels_dir = package_dir / "main" / "default" / "labels"
    labels_dir.mkdir(parents=True, exist_ok=True)
    path = labels_dir / "CustomLabels.labels-meta.xml"
    path.write_text(label_xml(labels))
    return path
