"""Read LiveJournal export records (as produced by ljdump).

An entry ``L-99`` lives in one XML file with an ``<event>`` root; its
comments, if any, live in a sibling ``C-99`` file with a ``<comments>``
root.
"""

from __future__ import annotations

import html
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel, ValidationError

from lj2hugo.errors import ParseError, ReadError
from lj2hugo.models import Comment, JournalRecord

logger = logging.getLogger(__name__)

PRIMARY_MARKER = "L-"
COMMENT_MARKER = "C-"


class FieldSpec(NamedTuple):
    """Maps an element path (relative to its parent) onto a model field."""

    path: str
    field: str
    numeric: bool = False
    lenient: bool = False


RECORD_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("itemid", "item_id", numeric=True),
    FieldSpec("subject", "subject"),
    FieldSpec("eventtime", "eventtime"),
    FieldSpec("event_timestamp", "event_timestamp", numeric=True),
    FieldSpec("url", "url"),
    FieldSpec("current_mood", "current_mood"),
    FieldSpec("current_moodid", "current_moodid", numeric=True, lenient=True),
    FieldSpec("opt_preformatted", "opt_preformatted", numeric=True),
    FieldSpec("current_music", "current_music"),
    FieldSpec("current_location", "current_location"),
    FieldSpec("props/taglist", "taglist"),
    FieldSpec("reply_count", "reply_count", numeric=True),
    FieldSpec("picture_keyword", "picture_keyword"),
    FieldSpec("event", "event"),
)

COMMENT_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("subject", "subject"),
    FieldSpec("user", "user"),
    FieldSpec("id", "id", numeric=True),
    FieldSpec("parentid", "parent_id"),
    FieldSpec("state", "state"),
    FieldSpec("date", "date"),
    FieldSpec("body", "body"),
)


def _check_field_map(specs: tuple[FieldSpec, ...], model: type[BaseModel]) -> None:
    """Fail at import time if a mapping names a field the model lacks."""
    known = set(model.model_fields)
    for spec in specs:
        if spec.field not in known:
            raise TypeError(f"{model.__name__} has no field {spec.field!r} (from <{spec.path}>)")


_check_field_map(RECORD_FIELDS, JournalRecord)
_check_field_map(COMMENT_FIELDS, Comment)


def _element_text(element: ET.Element) -> str:
    """Own character data only; text inside nested elements is skipped."""
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


def _decode_fields(element: ET.Element, specs: tuple[FieldSpec, ...]) -> dict[str, str]:
    """Collect the text of every mapped child that is present.

    Empty numeric elements keep the model default of 0. Lenient fields
    that are not integers are dropped instead of failing the record.
    """
    data: dict[str, str] = {}
    for spec in specs:
        child = element.find(spec.path)
        if child is None:
            continue
        text = _element_text(child)
        if not spec.numeric:
            data[spec.field] = text
            continue
        if not text:
            continue
        text = text.strip()
        if spec.lenient:
            try:
                int(text)
            except ValueError:
                logger.debug("Ignoring non-numeric <%s>: %r", spec.path, text)
                continue
        data[spec.field] = text
    return data


def _decode_comments(element: ET.Element, path: Path) -> list[Comment]:
    comments: list[Comment] = []
    for node in element.findall("comment"):
        try:
            comments.append(Comment.model_validate(_decode_fields(node, COMMENT_FIELDS)))
        except ValidationError as exc:
            raise ParseError(path, f"bad comment: {exc}") from exc
    return comments


def _parse_xml(raw: bytes, path: Path, root_tag: str) -> ET.Element:
    try:
        root = ET.fromstring(raw)  # noqa: S314
    except ET.ParseError as exc:
        raise ParseError(path, f"malformed XML: {exc}") from exc
    if root.tag != root_tag:
        raise ParseError(path, f"expected element type <{root_tag}> but have <{root.tag}>")
    return root


def read_record(path: Path | str) -> JournalRecord:
    """Read and decode a single ``<event>`` export file.

    Args:
        path: Path to the primary record file.

    Returns:
        The decoded record, with its body HTML-unescaped.

    Raises:
        ReadError: If the file cannot be read.
        ParseError: If the XML is malformed or does not match the schema.
    """
    path = Path(path)
    logger.info("Importing LJ post from %s", path)

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ReadError(path, f"unable to read: {exc}") from exc

    root = _parse_xml(raw, path, "event")
    data: dict[str, object] = dict(_decode_fields(root, RECORD_FIELDS))

    inline = root.find("comments")
    if inline is not None:
        data["comments"] = _decode_comments(inline, path)

    try:
        record = JournalRecord.model_validate(data)
    except ValidationError as exc:
        raise ParseError(path, f"schema mismatch: {exc}") from exc

    record.event = html.unescape(record.event)
    return record


def comment_path_for(
    path: Path | str,
    *,
    primary_marker: str = PRIMARY_MARKER,
    comment_marker: str = COMMENT_MARKER,
) -> Path | None:
    """Derive the companion comment file for a record, e.g. L-99 -> C-99.

    Only the file name is rewritten. Returns None if the name has no marker.
    """
    path = Path(path)
    if primary_marker not in path.name:
        return None
    return path.with_name(path.name.replace(primary_marker, comment_marker, 1))


def read_comments(
    path: Path | str,
    record: JournalRecord,
    *,
    primary_marker: str = PRIMARY_MARKER,
    comment_marker: str = COMMENT_MARKER,
) -> JournalRecord:
    """Append the companion file's comments (if it exists) to ``record``.

    A missing companion file is not an error. Any other read or decode
    failure raises ParseError.
    """
    comment_path = comment_path_for(
        path, primary_marker=primary_marker, comment_marker=comment_marker
    )
    if comment_path is None:
        logger.debug("No comment marker %r in %s, skipping comments", primary_marker, path)
        return record

    logger.debug("Importing LJ comments for %s from %s", path, comment_path)
    try:
        raw = comment_path.read_bytes()
    except FileNotFoundError:
        logger.debug("No comment file at %s", comment_path)
        return record
    except OSError as exc:
        raise ParseError(comment_path, f"unable to read comments: {exc}") from exc

    root = _parse_xml(raw, comment_path, "comments")
    record.comments.extend(_decode_comments(root, comment_path))
    return record


def load_record(
    path: Path | str,
    *,
    include_comments: bool = True,
    primary_marker: str = PRIMARY_MARKER,
    comment_marker: str = COMMENT_MARKER,
) -> JournalRecord:
    """Read a record and, if requested, its companion comments."""
    record = read_record(path)
    if include_comments:
        read_comments(
            path, record, primary_marker=primary_marker, comment_marker=comment_marker
        )
    return record
