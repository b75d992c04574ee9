"""Tools for assistant access to the development log.

These functions are designed to be exposed as tools to an AI assistant,
letting it read the log and append entries without hand-writing Markdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from devlog.journal.entry import LogEntry, render_entry

if TYPE_CHECKING:
    from devlog.journal.store import DevelopmentLog


def get_log_tools(log: DevelopmentLog) -> dict[str, callable]:
    """Return a dict of tool_name -> callable for development log operations.

    These can be registered as MCP tools or called directly.
    """

    def read_log() -> str:
        """Read the whole development log."""
        content = log.read()
        return content or "(empty: no development log yet)"

    def append_entry(**fields: Any) -> str:
        """Append an entry built from task_id, title, summary, files, details, lessons."""
        section = log.append(LogEntry.from_dict(fields))
        return f"Appended to {log.path.name}: {section.splitlines()[0]}"

    def list_tasks() -> str:
        """List logged tasks, one per line."""
        entries = log.entries()
        if not entries:
            return "(no tasks logged yet)"
        return "\n".join(
            " ".join(p for p in (e.marker, f"Task {e.task_id}:", e.title) if p)
            for e in entries
        )

    def show_task(task_id: str) -> str:
        """Show the latest entry logged under task_id."""
        entry = log.find(task_id)
        if entry is None:
            return f"(no task {task_id} in the log)"
        return render_entry(entry)

    def next_task_id() -> str:
        """Suggest the next sequential task id."""
        return log.next_task_id()

    def update_progress_summary() -> str:
        """Rewrite the progress summary at the end of the log."""
        return log.update_progress_summary()

    return {
        "read_log": read_log,
        "append_entry": append_entry,
        "list_tasks": list_tasks,
        "show_task": show_task,
        "next_task_id": next_task_id,
        "update_progress_summary": update_progress_summary,
    }
