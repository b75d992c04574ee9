"""Tests for log entry records and the Markdown template."""

from __future__ import annotations

import pytest

from devlog.journal.entry import (
    FileChange,
    LogEntry,
    TechnicalDetail,
    code_fence,
    escape_prose,
    inline_code,
    render_entry,
    render_heading,
)


@pytest.fixture
def example() -> LogEntry:
    return LogEntry(
        task_id="2.1",
        title="Add Error Handling to API Endpoint",
        summary="Added comprehensive error handling...",
        files=[FileChange("backend/api/main.ts", "Added try-catch blocks")],
        lessons=["Always wrap external API calls in try-catch blocks"],
    )


class TestRenderEntry:
    def test_example_scenario(self, example: LogEntry):
        section = render_entry(example)
        assert section.startswith("## Task 2.1: Add Error Handling to API Endpoint ✅\n")
        assert section == (
            "## Task 2.1: Add Error Handling to API Endpoint ✅\n"
            "\n"
            "### What We Did\n"
            "\n"
            "Added comprehensive error handling...\n"
            "\n"
            "### Files Created/Modified\n"
            "\n"
            "- `backend/api/main.ts` - Added try-catch blocks\n"
            "\n"
            "### What We Learned\n"
            "\n"
            "1. Always wrap external API calls in try-catch blocks\n"
        )

    def test_empty_optional_fields_leave_no_headers(self):
        section = render_entry(LogEntry(task_id="3", title="Nothing much"))
        assert section == "## Task 3: Nothing much ✅\n"
        assert "###" not in section

    def test_blank_summary_and_empty_details_are_skipped(self):
        entry = LogEntry(
            task_id="4",
            title="Blank",
            summary="   \n",
            details=[TechnicalDetail()],
            lessons=["Only a lesson"],
        )
        section = render_entry(entry)
        assert "### What We Did" not in section
        assert "### Technical Details" not in section
        assert "### What We Learned" in section

    def test_date_line(self, example: LogEntry):
        example.date = "2026-10-17"
        section = render_entry(example)
        assert "\n\n**Date:** 2026-10-17\n\n### What We Did" in section

    def test_file_without_description(self):
        entry = LogEntry(task_id="1", title="T", files=[FileChange("README.md")])
        assert "- `README.md`\n" in render_entry(entry)

    def test_technical_detail_block(self):
        entry = LogEntry(
            task_id="1",
            title="Setup",
            details=[
                TechnicalDetail(
                    heading="Virtual environments",
                    body="An isolated place for dependencies.",
                    code="python -m venv .venv",
                    language="bash",
                    terms=[("venv", "the standard library environment tool")],
                )
            ],
        )
        section = render_entry(entry)
        assert (
            "### Technical Details\n"
            "\n"
            "#### Virtual environments\n"
            "\n"
            "An isolated place for dependencies.\n"
            "\n"
            "```bash\n"
            "python -m venv .venv\n"
            "```\n"
            "\n"
            "**Key terms:**\n"
            "- **venv**: the standard library environment tool\n"
        ) in section

    def test_detail_without_heading_gets_numbered(self):
        entry = LogEntry(task_id="1", title="T", details=[TechnicalDetail(body="text")])
        assert "#### Detail 1" in render_entry(entry)

    def test_code_with_fences_stays_balanced(self):
        code = 'print("```")\n```\nstill code'
        entry = LogEntry(
            task_id="1", title="T", details=[TechnicalDetail(heading="H", code=code)]
        )
        section = render_entry(entry)
        assert "````\n" + code + "\n````" in section

    def test_backtick_language_uses_tilde_fence(self):
        detail = TechnicalDetail(heading="H", code="x = 1", language="py`x")
        section = render_entry(LogEntry(task_id="1", title="T", details=[detail]))
        assert "~~~py`x\nx = 1\n~~~" in section

    def test_unicode_line_breaks_in_file_list(self):
        entry = LogEntry(
            task_id="1", title="T", files=[FileChange("a\u2028## Task 9", "d\x85more")]
        )
        assert "- `a ## Task 9` - d more\n" in render_entry(entry)

    def test_multiline_lesson_is_indented(self):
        entry = LogEntry(task_id="1", title="T", lessons=["first\nsecond", "third"])
        assert "1. first\n   second\n2. third\n" in render_entry(entry)

    def test_ends_with_single_newline(self, example: LogEntry):
        example.lessons = ["trailing\n\n"]
        section = render_entry(example)
        assert section.endswith("trailing\n")
        assert not section.endswith("\n\n")


class TestRenderHeading:
    def test_status_markers(self):
        assert render_heading(LogEntry("5", "WIP", status="in_progress")) == "## Task 5: WIP 🚧"
        assert render_heading(LogEntry("6", "Stuck", status="blocked")) == "## Task 6: Stuck ❌"

    def test_whitespace_collapsed(self):
        entry = LogEntry(" 1 ", "  Multi\nline   title ")
        assert render_heading(entry) == "## Task 1: Multi line title ✅"

    def test_colon_in_id_replaced(self):
        assert render_heading(LogEntry("a:b", "T")) == "## Task a-b: T ✅"

    def test_empty_title(self):
        assert render_heading(LogEntry("4", "")) == "## Task 4: ✅"


class TestHelpers:
    def test_code_fence_minimum(self):
        assert code_fence("x = 1") == "```"

    def test_code_fence_longer_than_content(self):
        assert code_fence("`````") == "``````"

    def test_inline_code_plain(self):
        assert inline_code("src/app.py") == "`src/app.py`"

    def test_inline_code_with_backticks(self):
        assert inline_code("a`b") == "``a`b``"
        assert inline_code("`edge") == "`` `edge ``"
        assert inline_code("  ") == "`  `"

    def test_escape_prose(self):
        assert escape_prose("# heading\ntext\n```\n---") == "\\# heading\ntext\n\\```\n\\---"

    def test_escape_prose_adds_one_backslash(self):
        assert escape_prose("\\# literal") == "\\\\# literal"
        assert escape_prose("**Key terms:**") == "\\**Key terms:**"
        assert escape_prose("\\plain") == "\\plain"


class TestFromDict:
    def test_example_record(self):
        entry = LogEntry.from_dict(
            {
                "id": "2.1",
                "title": "Add Error Handling to API Endpoint",
                "summary": "Added comprehensive error handling...",
                "files": [["backend/api/main.ts", "Added try-catch blocks"]],
                "lessons": ["Always wrap external API calls in try-catch blocks"],
            }
        )
        assert entry.task_id == "2.1"
        assert entry.files == [FileChange("backend/api/main.ts", "Added try-catch blocks")]
        assert entry.status == "done"

    def test_file_forms(self):
        entry = LogEntry.from_dict(
            {
                "task_id": "1",
                "title": "T",
                "files": [
                    {"path": "a.py", "description": "new"},
                    ["b.py"],
                    "c.py",
                ],
            }
        )
        assert entry.files == [
            FileChange("a.py", "new"),
            FileChange("b.py", ""),
            FileChange("c.py", ""),
        ]

    def test_terms_as_mapping(self):
        entry = LogEntry.from_dict(
            {"task_id": "1", "title": "T", "details": [{"heading": "H", "terms": {"API": "interface"}}]}
        )
        assert entry.details[0].terms == [("API", "interface")]

    def test_to_dict_inverse(self, example: LogEntry):
        example.details = [TechnicalDetail("H", "body", "x", "py", [("t", "d")])]
        example.date = "2026-01-01"
        assert LogEntry.from_dict(example.to_dict()) == example

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            LogEntry.from_dict({"task_id": "1", "title": "T", "status": "finished"})

    def test_not_a_mapping(self):
        with pytest.raises(TypeError):
            LogEntry.from_dict(["not", "a", "mapping"])

    def test_malformed_file_pair(self):
        with pytest.raises(ValueError):
            LogEntry.from_dict({"task_id": "1", "title": "T", "files": [["a", "b", "c"]]})

    def test_null_fields_become_empty(self):
        entry = LogEntry.from_dict({"task_id": None, "id": "3", "title": None, "summary": None})
        assert entry.task_id == "3"
        assert entry.title == ""
        assert entry.summary == ""
        assert LogEntry.from_dict({"title": "T"}).task_id == ""
