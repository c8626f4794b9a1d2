"""Hugo post publisher for decoded journal records."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from lj2hugo.errors import ParseError, WriteError
from lj2hugo.models import Comment, CommentState, JournalRecord
from lj2hugo.moods import mood_name

logger = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "+++"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
COMMENTS_HEADER = "\n<p/>\n<p/>\n<hr/><h3>Comments:</h3>\n"

_DATE_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")
_TITLE_ESCAPES = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&#34;", "'": "&#39;"}
)


def escape_title(text: str) -> str:
    """Escape ``&<>"'`` as HTML entities, leaving everything else alone."""
    return text.translate(_TITLE_ESCAPES)


def format_param(name: str, value: str) -> str:
    return f'{name} = "{value}"\n'


def format_list_param(name: str, values: list[str]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"{name} = [{quoted}]\n"


def reformat_date(eventtime: str, *, source: Path | str = "") -> str:
    """Parse an event time and render it back in the same fixed format.

    Raises:
        ParseError: If ``eventtime`` is not exactly ``YYYY-MM-DD HH:MM:SS``.
    """
    if not _DATE_SHAPE.fullmatch(eventtime):
        raise ParseError(source, f"unable to parse date [{eventtime}]")
    try:
        when = datetime.strptime(eventtime, DATE_FORMAT)
    except ValueError as exc:
        raise ParseError(source, f"unable to parse date [{eventtime}]: {exc}") from exc
    return when.strftime(DATE_FORMAT)


class CommentVisibility(BaseModel):
    """Which non-normal comment states get rendered."""

    show_spam: bool = False
    show_banned: bool = False
    show_deleted: bool = False

    def is_visible(self, comment: Comment) -> bool:
        if comment.state == CommentState.SPAM:
            return self.show_spam
        if comment.state == CommentState.BANNED:
            return self.show_banned
        if comment.state == CommentState.DELETED:
            return self.show_deleted
        return True


class HugoPublisher:
    """Formats a journal record as a Hugo post with TOML front matter."""

    def __init__(
        self,
        visibility: CommentVisibility | None = None,
        *,
        resolve_mood_ids: bool = False,
    ) -> None:
        self._visibility = visibility or CommentVisibility()
        self._resolve_mood_ids = resolve_mood_ids

    def output_path(self, base: Path | str) -> Path:
        base = Path(base)
        return base.with_name(base.name + ".md")

    def write_post(self, record: JournalRecord, base: Path | str) -> Path:
        """Write ``<base>.md`` for a record.

        The whole post is formatted before the destination is opened, so a
        bad event time leaves no partial file behind.

        Raises:
            ParseError: If the event time is malformed.
            WriteError: If the destination cannot be created or written.
        """
        path = self.output_path(base)
        text = self.format_post(record, source=base)

        logger.info("Exporting Hugo post to %s", path)
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as exc:
            raise WriteError(path, f"unable to write output: {exc}") from exc
        return path

    def format_post(self, record: JournalRecord, *, source: Path | str = "") -> str:
        fm = self.format_front_matter(record, source=source)
        body = self.format_body(record)
        return fm + body + self.format_comments(record.comments)

    def format_front_matter(self, record: JournalRecord, *, source: Path | str = "") -> str:
        parts: list[str] = [FRONT_MATTER_DELIMITER + "\n"]
        parts.append(format_param("title", escape_title(record.subject)))

        tags = self.derive_tags(record)
        if tags:
            parts.append(format_list_param("tags", tags))

        if record.picture_keyword:
            parts.append(format_list_param("images", [f"{record.picture_keyword}.png"]))

        parts.append(format_param("date", reformat_date(record.eventtime, source=source)))
        parts.append(FRONT_MATTER_DELIMITER + "\n\n")
        return "".join(parts)

    def derive_tags(self, record: JournalRecord) -> list[str]:
        """Split the taglist and append a synthetic mood tag.

        Splitting an empty taglist yields ``[""]``; that element is kept.
        """
        tags = record.taglist.split(",")
        mood = self.mood_for(record)
        if mood:
            tags.append(f"mood: {mood}")
        return tags

    def mood_for(self, record: JournalRecord) -> str:
        if record.current_mood:
            return record.current_mood
        if self._resolve_mood_ids and record.current_moodid:
            return mood_name(record.current_moodid)
        return ""

    def format_body(self, record: JournalRecord) -> str:
        text = record.event.replace("\r", "")
        if record.is_preformatted:
            return f"<pre>\n{text}</pre>\n"
        return text

    def format_comments(self, comments: list[Comment]) -> str:
        if not comments:
            return ""
        parts = [COMMENTS_HEADER]
        for comment in comments:
            if self._visibility.is_visible(comment):
                parts.append(self.format_comment(comment))
        return "".join(parts)

    @staticmethod
    def format_comment(comment: Comment) -> str:
        lines = [
            f"<h4>Comment #{comment.id} from {comment.user} at {comment.date}:</h4>\n<p>"
        ]
        if comment.subject:
            lines.append(f"<b>Subject:</b> {comment.subject}<br/>\n")
        if comment.parent_id:
            lines.append(f"<b>In-Reply-To:</b> {comment.parent_id}<br/>\n")
        lines.append(comment.body)
        lines.append("</p>\n\n")
        return "".join(lines)
