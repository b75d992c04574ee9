"""Log entry records and the Markdown template they render to.

One entry is one ``## Task <id>: <title> <marker>`` section of the
development log. Fields are free text and never validated for content;
rendering only guarantees the section is structurally well formed
(headings present, fenced code balanced, no empty subsections).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

STATUS_MARKERS = {"done": "✅", "in_progress": "🚧", "blocked": "❌"}

TASK_HEADING_PREFIX = "## Task "
SEPARATOR = "---"

DATE_LABEL = "**Date:**"
SUMMARY_HEADING = "### What We Did"
FILES_HEADING = "### Files Created/Modified"
DETAILS_HEADING = "### Technical Details"
LESSONS_HEADING = "### What We Learned"
TERMS_LABEL = "**Key terms:**"

_BACKTICK_RUN = re.compile(r"`+")
_BLOCK_START = re.compile(r"^( {0,3})(\\*(?:#|```|~~~|---|\*\*Key terms:\*\*))")


@dataclass
class FileChange:
    """A file touched by the task, with a one-line note on what changed."""

    path: str
    description: str = ""


@dataclass
class TechnicalDetail:
    """One explanatory block under ``### Technical Details``."""

    heading: str = ""
    body: str = ""
    code: str = ""
    language: str = ""
    terms: list[tuple[str, str]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.heading.strip() or self.body.strip() or self.code.strip() or self.terms
        )


@dataclass
class LogEntry:
    """A single unit of work as recorded in the development log."""

    task_id: str
    title: str
    summary: str = ""
    files: list[FileChange] = field(default_factory=list)
    details: list[TechnicalDetail] = field(default_factory=list)
    lessons: list[str] = field(default_factory=list)
    status: str = "done"
    date: str | None = None

    @property
    def marker(self) -> str:
        return STATUS_MARKERS.get(self.status, "")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LogEntry:
        """Build an entry from a JSON-style mapping.

        Accepts ``id`` as an alias for ``task_id``. Files may be given as
        ``{"path", "description"}`` mappings or ``[path, description]``
        pairs; technical-detail terms likewise as mappings or pairs.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"log entry must be a mapping, got {type(data).__name__}")

        status = str(data.get("status") or "done")
        if status not in STATUS_MARKERS:
            raise ValueError(
                f"unknown status {status!r} (expected one of {', '.join(STATUS_MARKERS)})"
            )

        task_id = data.get("task_id")
        if task_id is None:
            task_id = data.get("id")
        date = data.get("date")
        return cls(
            task_id=_text(task_id),
            title=_text(data.get("title")),
            summary=_text(data.get("summary")),
            files=[_file_from_value(v) for v in data.get("files") or []],
            details=[_detail_from_value(v) for v in data.get("details") or []],
            lessons=[str(lesson) for lesson in data.get("lessons") or []],
            status=status,
            date=str(date) if date else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "task_id": self.task_id,
            "title": self.title,
            "summary": self.summary,
            "files": [{"path": f.path, "description": f.description} for f in self.files],
            "details": [
                {
                    "heading": d.heading,
                    "body": d.body,
                    "code": d.code,
                    "language": d.language,
                    "terms": [{"term": t, "definition": dfn} for t, dfn in d.terms],
                }
                for d in self.details
            ],
            "lessons": list(self.lessons),
            "status": self.status,
        }
        if self.date:
            data["date"] = self.date
        return data


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _pair_from_value(value: Any, keys: tuple[str, str], what: str) -> tuple[str, str]:
    if isinstance(value, Mapping):
        return str(value.get(keys[0], "")), str(value.get(keys[1], "") or "")
    if isinstance(value, str):
        return value, ""
    items = list(value)
    if not 1 <= len(items) <= 2:
        raise ValueError(f"{what} must be [{keys[0]}, {keys[1]}], got {value!r}")
    first = str(items[0])
    second = str(items[1]) if len(items) == 2 and items[1] is not None else ""
    return first, second


def _file_from_value(value: Any) -> FileChange:
    path, description = _pair_from_value(value, ("path", "description"), "file change")
    return FileChange(path=path, description=description)


def _detail_from_value(value: Any) -> TechnicalDetail:
    if not isinstance(value, Mapping):
        raise TypeError(f"technical detail must be a mapping, got {type(value).__name__}")
    terms = value.get("terms") or []
    if isinstance(terms, Mapping):
        terms = list(terms.items())
    return TechnicalDetail(
        heading=str(value.get("heading", "")),
        body=str(value.get("body", "")),
        code=str(value.get("code", "")),
        language=str(value.get("language", "") or ""),
        terms=[_pair_from_value(t, ("term", "definition"), "term") for t in terms],
    )


# ── Rendering ─────────────────────────────────────────────


def normalize_task_id(task_id: str) -> str:
    """Collapse whitespace; ``:`` separates id from title so it becomes ``-``."""
    return collapse_whitespace(task_id).replace(":", "-")


def collapse_whitespace(text: str) -> str:
    return " ".join(str(text).split())


def _single_line(text: str) -> str:
    return " ".join(str(text).splitlines())


def code_fence(code: str, char: str = "`") -> str:
    """A fence one character longer than any run inside ``code`` (min 3)."""
    runs = [len(m) for m in re.findall(re.escape(char) + "+", code)]
    return char * max(3, max(runs, default=0) + 1)


def inline_code(text: str) -> str:
    """Wrap ``text`` in a code span that survives embedded backticks."""
    longest = max((len(m) for m in _BACKTICK_RUN.findall(text)), default=0)
    ticks = "`" * (longest + 1)
    if text.strip(" ") and (text[:1] in ("`", " ") or text[-1:] in ("`", " ")):
        return f"{ticks} {text} {ticks}"
    return f"{ticks}{text}{ticks}"


def escape_prose(text: str) -> str:
    """Backslash-escape lines that would read as structure of the entry.

    Lines already led by backslashes get one more, so unescaping is exact.
    """
    return "\n".join(_BLOCK_START.sub(r"\1\\\2", line) for line in text.splitlines())


def render_heading(entry: LogEntry) -> str:
    line = f"{TASK_HEADING_PREFIX}{normalize_task_id(entry.task_id)}:"
    title = collapse_whitespace(entry.title)
    if title:
        line += f" {title}"
    if entry.marker:
        line += f" {entry.marker}"
    return line


def _render_files(files: list[FileChange]) -> str:
    lines = [FILES_HEADING, ""]
    for change in files:
        item = f"- {inline_code(_single_line(change.path))}"
        description = _single_line(change.description).strip()
        if description:
            item += f" - {description}"
        lines.append(item)
    return "\n".join(lines)


def _render_detail(index: int, detail: TechnicalDetail) -> str:
    heading = collapse_whitespace(detail.heading) or f"Detail {index}"
    blocks = [f"#### {heading}"]
    if detail.body.strip():
        blocks.append(escape_prose(detail.body.strip("\n")))
    if detail.code.strip():
        code = detail.code.strip("\n")
        language = collapse_whitespace(detail.language)
        # a backtick fence's info string may not contain backticks
        fence = code_fence(code, "~" if "`" in language else "`")
        if language.startswith(fence[0]):
            language = f" {language}"
        blocks.append(f"{fence}{language}\n{code}\n{fence}")
    if detail.terms:
        terms = [TERMS_LABEL]
        for term, definition in detail.terms:
            terms.append(f"- **{collapse_whitespace(term)}**: {_single_line(definition).strip()}")
        blocks.append("\n".join(terms))
    return "\n\n".join(blocks)


def _render_details(details: list[TechnicalDetail]) -> str:
    parts = [DETAILS_HEADING]
    index = 0
    for detail in details:
        if detail.is_empty():
            continue
        index += 1
        parts.append(_render_detail(index, detail))
    return "\n\n".join(parts)


def _render_lessons(lessons: list[str]) -> str:
    lines = [LESSONS_HEADING, ""]
    for number, lesson in enumerate(lessons, start=1):
        first, *rest = escape_prose(lesson.strip("\n")).split("\n")
        lines.append(f"{number}. {first}".rstrip())
        lines.extend(f"   {line}" if line.strip() else "" for line in rest)
    return "\n".join(lines)


def render_entry(entry: LogEntry) -> str:
    """Render an entry as a Markdown section ending in a single newline."""
    blocks = [render_heading(entry)]
    if entry.date:
        blocks.append(f"{DATE_LABEL} {collapse_whitespace(entry.date)}")
    if entry.summary.strip():
        blocks.append(f"{SUMMARY_HEADING}\n\n{escape_prose(entry.summary.strip())}")
    if entry.files:
        blocks.append(_render_files(entry.files))
    if any(not d.is_empty() for d in entry.details):
        blocks.append(_render_details(entry.details))
    if entry.lessons:
        blocks.append(_render_lessons(entry.lessons))
    return "\n\n".join(blocks) + "\n"
