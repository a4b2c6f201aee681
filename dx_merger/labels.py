"""
Custom label merging.

Every ``CustomLabels.labels-meta.xml`` fragment found under the project is
parsed and folded into one document; the first definition of each label name
wins and later duplicates are dropped.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Literal, Sequence

from lxml import etree

from .project import LABELS_FILE_NAME, DxMergerError

METADATA_NAMESPACE = "http://soap.sforce.com/2006/04/metadata"

DedupScope = Literal["run", "file"]


class LabelMergeError(DxMergerError):
    """Raised when a label fragment cannot be parsed."""


@dataclass
class LabelEntry:
    full_name: str
    language: str | None = None
    protected: str | None = None
    short_description: str | None = None
    value: str | None = None

    def field_values(self) -> List[tuple[str, str | None]]:
        return [
            ("fullName", self.full_name),
            ("language", self.language),
            ("protected", self.protected),
            ("shortDescription", self.short_description),
            ("value", self.value),
        ]


@dataclass
class LabelMergeResult:
    output: str
    files: List[str] = field(default_factory=list)
    labels: List[LabelEntry] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    written: bool = False


def merge_custom_labels(
    root: Path,
    output: Path,
    *,
    dedup_scope: DedupScope = "run",
    dry_run: bool = False,
) -> LabelMergeResult:
    logging.info("Merging custom labels")
    if dedup_scope not in ("run", "file"):
        raise DxMergerError(f"Unknown label dedup scope: {dedup_scope}")

    if dry_run:
        logging.info("Dry run: would remove %s", output)
    else:
        try:
            output.unlink()
        except FileNotFoundError:
            pass

    files = find_label_files(root, exclude=[output])
    logging.info("Found %d custom label file(s) to merge.", len(files))
    for path in files:
        logging.info("  %s", path)

    result = LabelMergeResult(output=str(output), files=[str(path) for path in files])
    seen: set[str] = set()
    for path in files:
        if dedup_scope == "file":
            seen = set()
        for entry in read_label_file(path):
            if entry.full_name in seen:
                logging.debug("Skipping duplicate custom label %s in %s", entry.full_name, path)
                result.duplicates.append(entry.full_name)
                continue
            logging.debug("Copying custom label node: %s", entry.full_name)
            seen.add(entry.full_name)
            result.labels.append(entry)

    if dry_run:
        logging.info("Dry run: would write %d label(s) to %s", len(result.labels), output)
        return result

    document = build_label_document(result.labels)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(
        etree.tostring(document, pretty_print=True, xml_declaration=True, encoding="UTF-8")
    )
    result.written = True
    logging.info("Custom labels file compiled successfully... saving at %s", output)
    return result


def find_label_files(root: Path, exclude: Iterable[Path] = ()) -> List[Path]:
    excluded = {path.resolve() for path in exclude}
    matches: List[Path] = []
    for current, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            if name != LABELS_FILE_NAME:
                continue
            path = Path(current) / name
            if path.resolve() in excluded:
                continue
            matches.append(path)
    return matches


def read_label_file(path: Path) -> List[LabelEntry]:
    parser = etree.XMLParser(remove_blank_text=True)
    try:
        tree = etree.parse(str(path), parser=parser)
    except (etree.XMLSyntaxError, OSError) as exc:
        raise LabelMergeError(f"Failed to parse custom labels in {path}: {exc}") from exc

    entries: List[LabelEntry] = []
    for node in tree.getroot():
        if not isinstance(node.tag, str):
            continue
        if not any(isinstance(child.tag, str) for child in node):
            continue
        name_node = find_child(node, "fullName")
        if name_node is None or not (name_node.text or "").strip():
            raise LabelMergeError(f"Custom label without fullName in {path} (line {node.sourceline})")
        entries.append(
            LabelEntry(
                full_name=name_node.text,
                language=_child_text(node, "language"),
                protected=_child_text(node, "protected"),
                short_description=_child_text(node, "shortDescription"),
                value=_child_text(node, "value"),
            )
        )
    return entries


def find_child(node: etree._Element, name: str) -> etree._Element | None:
    # Last match wins when a field is repeated.
    result = None
    for child in node:
        if isinstance(child.tag, str) and etree.QName(child).localname == name:
            result = child
    return result


def build_label_document(entries: Sequence[LabelEntry]) -> etree._Element:
    document = etree.Element(_qualified("CustomLabels"), nsmap={None: METADATA_NAMESPACE})
    for entry in entries:
        label = etree.SubElement(document, _qualified("labels"))
        for name, text in entry.field_values():
            if text is None:
                continue
            etree.SubElement(label, _qualified(name)).text = text
    return document


def _child_text(node: etree._Element, name: str) -> str | None:
    child = find_child(node, name)
    if child is None:
        return None
    return child.text or ""


def _qualified(name: str) -> str:
    return f"{{{METADATA_NAMESPACE}}}{name}"
