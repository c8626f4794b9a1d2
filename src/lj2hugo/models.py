"""Pure data models for LiveJournal records.

All Pydantic models and enums live here. No I/O, no formatting logic.
The loader builds these; the publisher only reads them.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field


class CommentState(StrEnum):
    """Known comment state codes from the LiveJournal export."""

    SPAM = "S"
    BANNED = "B"
    DELETED = "D"


class Comment(BaseModel):
    """One reply in an entry's comment thread."""

    id: int = 0
    subject: str = ""
    user: str = ""
    parent_id: str = ""
    state: str = ""
    date: str = ""
    body: str = ""


class JournalRecord(BaseModel):
    """One journal entry decoded from an ``ljdump`` export file.

    ``event_timestamp``, ``url``, ``current_music``, ``current_location``
    and ``reply_count`` are decoded for completeness but never rendered.
    """

    item_id: int = 0
    subject: str = ""
    eventtime: str = ""
    event_timestamp: int = 0
    url: str = ""
    current_mood: str = ""
    current_moodid: int = 0
    opt_preformatted: int = 0
    current_music: str = ""
    current_location: str = ""
    taglist: str = ""
    reply_count: int = 0
    picture_keyword: str = ""
    event: str = ""
    comments: list[Comment] = Field(default_factory=list)

    @property
    def is_preformatted(self) -> bool:
        return self.opt_preformatted == 1


class ConversionResult(BaseModel):
    """Outcome of converting one input path."""

    source: Path
    output: Path | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error
