"""Tests for the LiveJournal record loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from lj2hugo.errors import ParseError, ReadError
from lj2hugo.loader import (
    RECORD_FIELDS,
    FieldSpec,
    _check_field_map,
    comment_path_for,
    load_record,
    read_comments,
    read_record,
)
from lj2hugo.models import JournalRecord


def _make_event_xml(**overrides: str) -> str:
    fields = {
        "itemid": "99",
        "subject": "A day out",
        "eventtime": "2004-06-12 18:30:00",
        "event_timestamp": "1087065000",
        "url": "https://example.livejournal.com/25344.html",
        "current_mood": "",
        "opt_preformatted": "0",
        "reply_count": "2",
        "picture_keyword": "",
        "event": "Went to the &amp;lt;b&amp;gt;beach&amp;lt;/b&amp;gt; &amp;amp;amp; swam.",
    }
    fields.update(overrides)
    taglist = fields.pop("taglist", "beach,summer")
    body = "".join(f"<{k}>{v}</{k}>" for k, v in fields.items())
    return f'<?xml version="1.0"?><event>{body}<props><taglist>{taglist}</taglist></props></event>'


_COMMENTS_XML = (
    '<?xml version="1.0"?><comments>'
    "<comment><id>1</id><user>alice</user><subject>Hi</subject>"
    "<date>2004-06-13T09:00:00Z</date><body>Nice!</body></comment>"
    "<comment><id>2</id><user>bob</user><parentid>1</parentid><state>S</state>"
    "<date>2004-06-13T10:00:00Z</date><body>Buy now</body></comment>"
    "</comments>"
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestFieldMap:
    def test_record_map_matches_model(self):
        _check_field_map(RECORD_FIELDS, JournalRecord)

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError, match="no_such_field"):
            _check_field_map((FieldSpec("x", "no_such_field"),), JournalRecord)


class TestReadRecord:
    def test_decodes_scalar_fields(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml(current_mood="sunny"))
        record = read_record(path)
        assert record.item_id == 99
        assert record.subject == "A day out"
        assert record.eventtime == "2004-06-12 18:30:00"
        assert record.event_timestamp == 1087065000
        assert record.current_mood == "sunny"
        assert record.reply_count == 2
        assert record.taglist == "beach,summer"

    def test_unescapes_event_once(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        record = read_record(path)
        # XML decoding removes one layer, html.unescape exactly one more
        assert record.event == "Went to the <b>beach</b> &amp; swam."

    def test_subject_not_unescaped(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml(subject="Fish &amp;amp; chips"))
        record = read_record(path)
        assert record.subject == "Fish &amp; chips"

    def test_missing_fields_use_defaults(self, tmp_path):
        path = _write(
            tmp_path / "L-1",
            "<event><subject>x</subject><eventtime>2004-01-01 00:00:00</eventtime></event>",
        )
        record = read_record(path)
        assert record.taglist == ""
        assert record.picture_keyword == ""
        assert record.opt_preformatted == 0
        assert record.comments == []

    def test_numeric_whitespace_trimmed(self, tmp_path):
        path = _write(tmp_path / "L-1", _make_event_xml(itemid="  42\n"))
        assert read_record(path).item_id == 42

    def test_empty_numeric_is_zero(self, tmp_path):
        xml = _make_event_xml(itemid="", reply_count="", current_moodid="")
        xml = xml.replace("<reply_count></reply_count>", "<reply_count/>")
        record = read_record(_write(tmp_path / "L-1", xml))
        assert record.item_id == 0
        assert record.reply_count == 0
        assert record.current_moodid == 0
        assert record.subject == "A day out"

    def test_whitespace_numeric_rejected(self, tmp_path):
        path = _write(tmp_path / "L-1", _make_event_xml(itemid="  "))
        with pytest.raises(ParseError):
            read_record(path)

    def test_non_numeric_moodid_ignored(self, tmp_path):
        path = _write(tmp_path / "L-1", _make_event_xml(current_moodid="happy"))
        assert read_record(path).current_moodid == 0

    def test_nested_element_text_skipped(self, tmp_path):
        path = _write(tmp_path / "L-1", _make_event_xml(subject="Hello <i>there</i> world"))
        assert read_record(path).subject == "Hello  world"

    def test_inline_comments(self, tmp_path):
        xml = _make_event_xml().removesuffix("</event>") + (
            "<comments><comment><id>5</id><user>carol</user></comment></comments></event>"
        )
        record = read_record(_write(tmp_path / "L-1", xml))
        assert [c.user for c in record.comments] == ["carol"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ReadError):
            read_record(tmp_path / "L-404")

    def test_malformed_xml(self, tmp_path):
        path = _write(tmp_path / "L-1", "<event><subject>oops</event>")
        with pytest.raises(ParseError, match="malformed"):
            read_record(path)

    def test_wrong_root(self, tmp_path):
        path = _write(tmp_path / "L-1", "<comments></comments>")
        with pytest.raises(ParseError, match="<event>"):
            read_record(path)

    def test_non_numeric_itemid(self, tmp_path):
        path = _write(tmp_path / "L-1", _make_event_xml(itemid="abc"))
        with pytest.raises(ParseError):
            read_record(path)


class TestCommentPath:
    def test_replaces_marker(self):
        assert comment_path_for(Path("/dump/L-99")) == Path("/dump/C-99")

    def test_only_first_occurrence(self):
        assert comment_path_for(Path("L-1L-2")) == Path("C-1L-2")

    def test_directory_untouched(self):
        assert comment_path_for(Path("/L-dir/L-7")) == Path("/L-dir/C-7")

    def test_no_marker(self):
        assert comment_path_for(Path("/dump/entry.xml")) is None

    def test_custom_markers(self):
        path = comment_path_for(Path("post-3.xml"), primary_marker="post-", comment_marker="talk-")
        assert path == Path("talk-3.xml")


class TestReadComments:
    def test_reads_companion(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        _write(tmp_path / "C-99", _COMMENTS_XML)
        record = read_comments(path, read_record(path))
        assert [c.id for c in record.comments] == [1, 2]
        first, second = record.comments
        assert first.subject == "Hi"
        assert first.parent_id == ""
        assert second.parent_id == "1"
        assert second.state == "S"
        assert second.body == "Buy now"

    def test_empty_comment_id_is_zero(self, tmp_path):
        path = _write(tmp_path / "L-2", _make_event_xml())
        _write(
            tmp_path / "C-2",
            "<comments><comment><id></id><user>u</user><body>hi</body></comment></comments>",
        )
        record = read_comments(path, read_record(path))
        assert [(c.id, c.user) for c in record.comments] == [(0, "u")]

    def test_missing_companion_is_not_an_error(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        record = read_comments(path, read_record(path))
        assert record.comments == []

    def test_bad_companion_xml(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        _write(tmp_path / "C-99", "<comments><comment>")
        with pytest.raises(ParseError):
            read_comments(path, read_record(path))

    def test_companion_wrong_root(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        _write(tmp_path / "C-99", _make_event_xml())
        with pytest.raises(ParseError, match="<comments>"):
            read_comments(path, read_record(path))

    def test_unreadable_companion(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        (tmp_path / "C-99").mkdir()
        with pytest.raises(ParseError, match="unable to read comments"):
            read_comments(path, read_record(path))


class TestLoadRecord:
    def test_comments_skipped_when_not_requested(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        _write(tmp_path / "C-99", _COMMENTS_XML)
        assert load_record(path, include_comments=False).comments == []

    def test_comments_loaded_by_default(self, tmp_path):
        path = _write(tmp_path / "L-99", _make_event_xml())
        _write(tmp_path / "C-99", _COMMENTS_XML)
        assert len(load_record(path).comments) == 2
