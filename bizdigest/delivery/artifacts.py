"""Write rendered digests to the output directory."""

from __future__ import annotations

from pathlib import Path

import structlog

from bizdigest.core.types import Digest, ReportType
from bizdigest.render.chat import render_chat_message
from bizdigest.render.markdown import render_markdown
from bizdigest.render.structured import render_json

logger = structlog.get_logger(__name__)

_STEMS = {
    ReportType.DAILY: "digest",
    ReportType.WEEKLY: "summary",
}


def artifact_paths(digest: Digest, output_dir: str | Path) -> dict[str, Path]:
    """Target paths keyed by format: ``json``, ``markdown``, ``chat``."""
    folder = Path(output_dir) / digest.type.value
    prefix = digest.date.isoformat()
    stem = _STEMS[digest.type]
    return {
        "json": folder / f"{prefix}_{stem}.json",
        "markdown": folder / f"{prefix}_{stem}.md",
        "chat": folder / f"{prefix}_slack.txt",
    }


def write_artifacts(
    digest: Digest,
    output_dir: str | Path,
    company: str = "",
) -> dict[str, Path]:
    """Render *digest* in every format and write the files.

    Layout: ``<output_dir>/<daily|weekly>/<date>_<digest|summary>.{json,md}``
    plus ``<date>_slack.txt``. Existing files for the same date are replaced.
    """
    paths = artifact_paths(digest, output_dir)
    contents = {
        "json": render_json(digest),
        "markdown": render_markdown(digest, company=company),
        "chat": render_chat_message(digest, company=company),
    }

    next(iter(paths.values())).parent.mkdir(parents=True, exist_ok=True)
    for key, path in paths.items():
        path.write_text(contents[key], encoding="utf-8")
        logger.info("artifact_written", format=key, path=str(path))
    return paths
