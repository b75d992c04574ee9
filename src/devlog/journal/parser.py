"""Recover log entries from a rendered development log.

Only structure is recovered: headings, the file list, lessons, and the
code/terms of technical details. Prose comes back as opaque text.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from devlog.journal.entry import (
    DATE_LABEL,
    DETAILS_HEADING,
    FILES_HEADING,
    LESSONS_HEADING,
    SEPARATOR,
    STATUS_MARKERS,
    SUMMARY_HEADING,
    TASK_HEADING_PREFIX,
    TERMS_LABEL,
    FileChange,
    LogEntry,
    TechnicalDetail,
)

_FENCE_OPEN = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_ESCAPED_BLOCK = re.compile(r"^( {0,3})\\(\\*(?:#|```|~~~|---|\*\*Key terms:\*\*))")
_FILE_ITEM = re.compile(r"^- (`+)(.*?)\1(?!`)(?: - (.*))?$")
_LESSON_ITEM = re.compile(r"^\d+\.(?: (.*))?$")
_TERM_ITEM = re.compile(r"^- \*\*(.*?)\*\*:(?: (.*))?$")


def iter_lines(text: str) -> Iterator[tuple[int, str, bool]]:
    """Yield ``(offset, line, in_fence)`` for each line of ``text``.

    ``in_fence`` is True for fence delimiters and everything between them.
    """
    fence: str | None = None
    offset = 0
    for line in text.splitlines(keepends=True):
        bare = line.rstrip("\r\n")
        if fence is None:
            match = _FENCE_OPEN.match(bare)
            if match and not (match.group(1)[0] == "`" and "`" in match.group(2)):
                fence = match.group(1)
                yield offset, bare, True
            else:
                yield offset, bare, False
        else:
            if _closes(bare, fence):
                fence = None
            yield offset, bare, True
        offset += len(line)


def _closes(line: str, fence: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and set(stripped) == {fence[0]} and len(stripped) >= len(fence)


def heading_offsets(text: str, level: int = 2) -> list[tuple[int, str]]:
    """Offsets of headings of exactly ``level`` outside code fences."""
    prefix = "#" * level + " "
    return [
        (offset, line)
        for offset, line, in_fence in iter_lines(text)
        if not in_fence and line.startswith(prefix)
    ]


def _strip_trailing_separator(section: str) -> str:
    lines = section.rstrip().splitlines()
    if lines and lines[-1].rstrip() == SEPARATOR:
        lines.pop()
    return "\n".join(lines).rstrip()


def split_sections(text: str) -> tuple[str, list[str]]:
    """Split a document at level-2 headings.

    Returns the preamble (title and intro) and the sections in document
    order. The ``---`` separator trailing a section is dropped.
    """
    offsets = [offset for offset, _ in heading_offsets(text)]
    if not offsets:
        return _strip_trailing_separator(text), []
    preamble = _strip_trailing_separator(text[: offsets[0]])
    bounds = offsets + [len(text)]
    sections = [
        _strip_trailing_separator(text[start:end]) for start, end in zip(bounds, bounds[1:])
    ]
    return preamble, sections


def _unescape(text: str) -> str:
    return "\n".join(_ESCAPED_BLOCK.sub(r"\1\2", line) for line in text.split("\n"))


def _trim_blank(lines: list[str]) -> list[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _subsections(lines: list[str], prefix: str) -> list[tuple[str, list[str]]]:
    """Group ``lines`` under headings starting with ``prefix`` (outside fences)."""
    groups: list[tuple[str, list[str]]] = []
    current: tuple[str, list[str]] | None = None
    for _, line, in_fence in iter_lines("\n".join(lines)):
        if not in_fence and line.startswith(prefix):
            current = (line, [])
            groups.append(current)
        elif current is not None:
            current[1].append(line)
    return groups


def parse_heading(line: str) -> tuple[str, str, str]:
    """Split a task heading into ``(task_id, title, status)``."""
    if not line.startswith(TASK_HEADING_PREFIX):
        raise ValueError(f"not a task heading: {line!r}")
    rest = line[len(TASK_HEADING_PREFIX) :].strip()
    status = "done"
    for name, marker in STATUS_MARKERS.items():
        if rest.endswith(marker):
            rest = rest[: -len(marker)].rstrip()
            status = name
            break
    task_id, _, title = rest.partition(":")
    return task_id.strip(), title.strip(), status


def _parse_files(lines: list[str]) -> list[FileChange]:
    files = []
    for line in lines:
        match = _FILE_ITEM.match(line.rstrip())
        if not match:
            continue
        path = match.group(2)
        if len(path) >= 2 and path[0] == " " and path[-1] == " " and path.strip(" "):
            path = path[1:-1]
        files.append(FileChange(path=path, description=(match.group(3) or "").strip()))
    return files


def _parse_lessons(lines: list[str]) -> list[str]:
    items: list[list[str]] = []
    for line in lines:
        match = _LESSON_ITEM.match(line)
        if match:
            items.append([match.group(1) or ""])
        elif items:
            items[-1].append(line[3:] if line.startswith("   ") else line)
    return [_unescape("\n".join(_trim_blank(item) or [""])) for item in items]


def _parse_detail(heading: str, lines: list[str]) -> TechnicalDetail:
    detail = TechnicalDetail(heading=heading[len("#### ") :].strip())
    body: list[str] = []
    blocks: list[list[str]] = []
    previous_in_fence = False
    in_terms = False
    for _, line, in_fence in iter_lines("\n".join(lines)):
        if in_fence:
            if not previous_in_fence:
                blocks.append([])
            blocks[-1].append(line)
            previous_in_fence = True
            continue
        previous_in_fence = False
        if line.rstrip() == TERMS_LABEL:
            in_terms = True
        elif in_terms:
            match = _TERM_ITEM.match(line.rstrip())
            if match:
                detail.terms.append((match.group(1), (match.group(2) or "").strip()))
        elif not blocks:
            body.append(line)

    if blocks:
        opener, *inner = blocks[0]
        match = _FENCE_OPEN.match(opener)
        fence = match.group(1) if match else "```"
        detail.language = match.group(2).strip() if match else ""
        if inner and _closes(inner[-1], fence):
            inner.pop()
        detail.code = "\n".join(inner)
    detail.body = _unescape("\n".join(_trim_blank(body)))
    return detail


def parse_entry(section: str) -> LogEntry:
    """Parse one ``## Task`` section back into a :class:`LogEntry`."""
    lines = _strip_trailing_separator(section).split("\n")
    if not lines or not lines[0].startswith(TASK_HEADING_PREFIX):
        raise ValueError("section does not start with a task heading")

    task_id, title, status = parse_heading(lines[0].rstrip())
    entry = LogEntry(task_id=task_id, title=title, status=status)

    head: list[str] = []
    for _, line, in_fence in iter_lines("\n".join(lines[1:])):
        if not in_fence and line.startswith("### "):
            break
        head.append(line)
    for line in head:
        if line.startswith(DATE_LABEL):
            entry.date = line[len(DATE_LABEL) :].strip() or None

    for heading, body in _subsections(lines[1:], "### "):
        name = heading.rstrip()
        if name == SUMMARY_HEADING:
            entry.summary = _unescape("\n".join(_trim_blank(body)))
        elif name == FILES_HEADING:
            entry.files = _parse_files(body)
        elif name == DETAILS_HEADING:
            entry.details = [
                _parse_detail(sub_heading, sub_body)
                for sub_heading, sub_body in _subsections(body, "#### ")
            ]
        elif name == LESSONS_HEADING:
            entry.lessons = _parse_lessons(body)
    return entry


def parse_log(text: str) -> list[LogEntry]:
    """All task entries of a development log, in document order."""
    _, sections = split_sections(text)
    return [parse_entry(s) for s in sections if s.startswith(TASK_HEADING_PREFIX)]
