"""Development log document: create once, append forever.

The Markdown file is the only state. Appends never rewrite earlier bytes;
the optional trailing progress summary is the one section that gets
replaced, and the document is backed up before that happens.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from devlog.journal.entry import (
    SEPARATOR,
    STATUS_MARKERS,
    LogEntry,
    normalize_task_id,
    render_entry,
    render_heading,
)
from devlog.journal.parser import heading_offsets, parse_log

logger = logging.getLogger(__name__)

SUMMARY_TITLE = "## Progress Summary"
STATE_DIR = ".devlog"

DEFAULT_TITLE = "Development Log"
DEFAULT_INTRO = (
    "This log records every change made to the project, one task per section. "
    "Each entry explains what was done, which files changed, the technical "
    "ideas behind the change in beginner-friendly terms, and what we learned."
)

_STATUS_LABELS = {"done": "Completed", "in_progress": "In progress", "blocked": "Blocked"}


class DevelopmentLog:
    """Read/append access to a ``DEVELOPMENT_LOG.md`` document."""

    def __init__(
        self,
        path: Path,
        title: str = DEFAULT_TITLE,
        intro: str = DEFAULT_INTRO,
        keep_versions: int = 10,
    ) -> None:
        self.path = Path(path)
        self.title = title
        self.intro = intro
        self.keep_versions = keep_versions

    @property
    def state_dir(self) -> Path:
        return self.path.parent / STATE_DIR

    # ── Initialization ────────────────────────────────────────

    def ensure_initialized(self) -> bool:
        """Create the document with its title and intro. Idempotent.

        Returns True if the file was created.
        """
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(f"# {self.title}\n\n{self.intro}\n", encoding="utf-8")
        logger.info("Created development log at %s", self.path)
        return True

    # ── Reading ───────────────────────────────────────────────

    def read(self) -> str:
        if self.path.exists():
            return self.path.read_text(encoding="utf-8")
        return ""

    def entries(self) -> list[LogEntry]:
        return parse_log(self.read())

    def find(self, task_id: str) -> LogEntry | None:
        """Last entry logged under ``task_id``; ids are not unique."""
        wanted = normalize_task_id(task_id)
        for entry in reversed(self.entries()):
            if entry.task_id == wanted:
                return entry
        return None

    def next_task_id(self) -> str:
        """One more than the largest leading integer among logged task ids."""
        numbers = []
        for entry in self.entries():
            match = re.match(r"\d+", entry.task_id)
            if match:
                numbers.append(int(match.group()))
        return str(max(numbers, default=0) + 1)

    # ── Appending ─────────────────────────────────────────────

    def _separator_prefix(self) -> str:
        """Text to write before a new section so prior bytes stay untouched."""
        size = self.path.stat().st_size
        if size == 0:
            return f"{SEPARATOR}\n\n"
        with self.path.open("rb") as f:
            f.seek(-1, 2)
            last = f.read(1)
        lead = "" if last == b"\n" else "\n"
        return f"{lead}\n{SEPARATOR}\n\n"

    def append(self, entry: LogEntry) -> str:
        """Render ``entry`` and append it after a separator line.

        Returns the rendered section. I/O errors propagate.
        """
        self.ensure_initialized()
        section = render_entry(entry)
        prefix = self._separator_prefix()
        with self.path.open("a", encoding="utf-8", newline="") as f:
            f.write(prefix + section)
        logger.info("Appended %s to %s", render_heading(entry)[3:], self.path)
        return section

    # ── Progress summary ──────────────────────────────────────

    def render_progress_summary(self, entries: list[LogEntry] | None = None) -> str:
        entries = self.entries() if entries is None else entries
        lines = [SUMMARY_TITLE, "", f"- **Tasks logged:** {len(entries)}"]
        for status, marker in STATUS_MARKERS.items():
            count = sum(1 for e in entries if e.status == status)
            lines.append(f"- **{_STATUS_LABELS[status]}:** {count} {marker}")
        if entries:
            lines.append("")
            for e in entries:
                parts = ["-", e.marker, f"Task {e.task_id}:", e.title]
                lines.append(" ".join(p for p in parts if p))
        return "\n".join(lines) + "\n"

    def _without_summary(self, text: str) -> str:
        """Drop an existing progress summary section and its separator."""
        headings = heading_offsets(text)
        for i, (start, line) in enumerate(headings):
            if line.rstrip() != SUMMARY_TITLE:
                continue
            if i + 1 < len(headings):
                end = headings[i + 1][0]
                return text[:start] + text[end:]
            head = text[:start].rstrip()
            if head.endswith(SEPARATOR):
                head = head[: -len(SEPARATOR)].rstrip()
            return head + "\n" if head else ""
        return text

    def update_progress_summary(self) -> str:
        """Replace the trailing progress summary with a fresh one.

        Returns the rendered summary section.
        """
        self.ensure_initialized()
        text = self.read()
        summary = self.render_progress_summary(parse_log(text))
        self._backup()
        remaining = self._without_summary(text)
        if remaining and not remaining.endswith("\n"):
            remaining += "\n"
        prefix = f"\n{SEPARATOR}\n\n" if remaining else ""
        self.path.write_text(remaining + prefix + summary, encoding="utf-8")
        logger.info("Updated progress summary in %s", self.path)
        return summary

    def _backup(self) -> None:
        """Backup to .devlog/versions/, keep at most ``keep_versions`` copies."""
        if not self.path.exists():
            return
        versions_dir = self.state_dir / "versions"
        versions_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%dT%H%M%S")
        (versions_dir / f"{self.path.stem}-{ts}.md").write_text(
            self.read(), encoding="utf-8"
        )
        old = sorted(versions_dir.glob(f"{self.path.stem}-*.md"))
        for f in old[: -self.keep_versions or None]:
            f.unlink()
