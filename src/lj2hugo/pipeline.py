"""Per-path conversion driver: load a record, then publish it."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from lj2hugo.config import ConvertConfig
from lj2hugo.errors import ConversionError
from lj2hugo.loader import load_record
from lj2hugo.models import ConversionResult
from lj2hugo.publisher import HugoPublisher

logger = logging.getLogger(__name__)


def convert_post(path: Path | str, config: ConvertConfig | None = None) -> Path:
    """Convert one LiveJournal export file into ``<path>.md``.

    Raises:
        ConversionError: Any ReadError, ParseError or WriteError for this path.
    """
    config = config or ConvertConfig()
    record = load_record(
        path,
        include_comments=config.show_comments,
        primary_marker=config.primary_marker,
        comment_marker=config.comment_marker,
    )
    publisher = HugoPublisher(config.visibility, resolve_mood_ids=config.resolve_mood_ids)
    return publisher.write_post(record, path)


def convert_posts(
    paths: Iterable[Path | str],
    config: ConvertConfig | None = None,
) -> list[ConversionResult]:
    """Convert each path in turn, collecting per-path outcomes.

    Stops at the first failure unless ``config.keep_going`` is set; paths
    after a stopping failure get no result.
    """
    config = config or ConvertConfig()
    results: list[ConversionResult] = []

    for path in paths:
        path = Path(path)
        try:
            output = convert_post(path, config)
        except ConversionError as exc:
            logger.error("Error converting %s: %s", path, exc)
            results.append(ConversionResult(source=path, error=str(exc)))
            if not config.keep_going:
                break
            continue
        results.append(ConversionResult(source=path, output=output))

    return results
