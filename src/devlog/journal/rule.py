"""Instruction artifact: the rule file that tells an assistant to keep the log.

The file is Markdown with YAML frontmatter. ``alwaysApply`` and
``priority`` are read by the assistant host; nothing here acts on them.
"""

from __future__ import annotations

import logging
from pathlib import Path

import frontmatter

from devlog.journal.entry import (
    FileChange,
    LogEntry,
    TechnicalDetail,
    code_fence,
    render_entry,
)

logger = logging.getLogger(__name__)

RULE_DESCRIPTION = "Keep a beginner-friendly development log after every code change"

RULE_BODY_TEMPLATE = """\
# Development Log

After every change you make to this project's code, append a new entry to
`{log_name}`. Never edit or delete earlier entries.

## When to update the log

- After creating, modifying or deleting code files
- After fixing a bug or adding error handling
- After changing configuration or dependencies
- When a task from the plan is completed or becomes blocked

## How to write an entry

- Number tasks sequentially (`1`, `2`, ... or `2.1` for sub-tasks)
- Keep "What We Did" to two or three plain sentences
- List every file you created or modified with a one-line description
- Explain each technical idea as if to a beginner and define new terms
- Include a short code excerpt when it helps explain the idea
- Finish with the lessons learned
- Separate entries with a `---` line

## Entry template

{example}
"""

EXAMPLE_ENTRY = LogEntry(
    task_id="2.1",
    title="Add Error Handling to API Endpoint",
    summary=(
        "Added comprehensive error handling to the main API endpoint so that "
        "failures in external calls return a clear message instead of crashing "
        "the server."
    ),
    files=[FileChange("backend/api/main.ts", "Added try-catch blocks")],
    details=[
        TechnicalDetail(
            heading="Try-catch blocks",
            body="A try-catch block runs code and catches any error it throws.",
            code=(
                "try {\n"
                "  const data = await fetchData();\n"
                "} catch (error) {\n"
                "  console.error(error);\n"
                "}"
            ),
            language="typescript",
            terms=[("Exception", "an error raised while the program is running")],
        )
    ],
    lessons=["Always wrap external API calls in try-catch blocks"],
)


def render_rule(
    log_name: str = "DEVELOPMENT_LOG.md",
    always_apply: bool = True,
    priority: str = "high",
) -> str:
    """Render the rule file, frontmatter included."""
    example = render_entry(EXAMPLE_ENTRY).rstrip("\n")
    fence = code_fence(example)
    body = RULE_BODY_TEMPLATE.format(
        log_name=log_name,
        example=f"{fence}markdown\n{example}\n{fence}",
    )
    post = frontmatter.Post(
        body.rstrip("\n"),
        description=RULE_DESCRIPTION,
        globs="**/*",
        alwaysApply=always_apply,
        priority=priority,
    )
    return frontmatter.dumps(post) + "\n"


def write_rule(
    path: Path,
    log_name: str = "DEVELOPMENT_LOG.md",
    always_apply: bool = True,
    priority: str = "high",
    force: bool = False,
) -> bool:
    """Write the rule file. Returns False if it exists and ``force`` is not set."""
    if path.exists() and not force:
        logger.info("Rule file %s already exists, leaving it untouched", path)
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_rule(log_name, always_apply, priority), encoding="utf-8")
    logger.info("Wrote rule file %s", path)
    return True


def load_rule(path: Path) -> dict:
    """Parse the rule file's frontmatter metadata."""
    try:
        post = frontmatter.load(str(path))
        return dict(post.metadata)
    except Exception:
        logger.debug("Could not parse rule frontmatter in %s", path, exc_info=True)
        return {}
