"""Entry point: python -m devlog <command>

- "init":          Create DEVELOPMENT_LOG.md and the assistant rule file
- "append [FILE]": Append an entry from a JSON record (FILE or stdin)
- "list":          One line per logged task
- "show TASK_ID":  Print the latest entry for a task
- "summary":       Rewrite the progress summary at the end of the log
- "next-id":       Print the next sequential task id
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from devlog.config import DevlogConfig, load_config

USAGE = """\
Usage: python -m devlog <command>
  init           Create the development log and the assistant rule file
  append [FILE]  Append an entry from a JSON record (FILE or stdin)
  list           List logged tasks
  show TASK_ID   Print the latest entry for TASK_ID
  summary        Rewrite the progress summary
  next-id        Print the next sequential task id"""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _open_log(config: DevlogConfig):
    from devlog.journal.store import DevelopmentLog

    return DevelopmentLog(
        config.log.path, title=config.log.title, keep_versions=config.log.keep_versions
    )


def _run_init(config: DevlogConfig) -> int:
    from devlog.journal.rule import write_rule

    log = _open_log(config)
    if log.ensure_initialized():
        print(f"Created {log.path}")
    else:
        print(f"{log.path} already exists")
    wrote = write_rule(
        config.rule.path,
        log_name=log.path.name,
        always_apply=config.rule.always_apply,
        priority=config.rule.priority,
    )
    print(f"{'Wrote' if wrote else 'Kept existing'} {config.rule.path}")
    return 0


def _run_append(config: DevlogConfig, args: list[str]) -> int:
    from devlog.journal.entry import LogEntry

    raw = Path(args[0]).read_text(encoding="utf-8") if args else sys.stdin.read()
    try:
        entry = LogEntry.from_dict(json.loads(raw))
    except (ValueError, TypeError) as e:
        print(f"Invalid log entry: {e}", file=sys.stderr)
        return 1
    section = _open_log(config).append(entry)
    sys.stdout.write(section)
    return 0


def _run_list(config: DevlogConfig) -> int:
    from devlog.tools.log_tools import get_log_tools

    print(get_log_tools(_open_log(config))["list_tasks"]())
    return 0


def _run_show(config: DevlogConfig, args: list[str]) -> int:
    from devlog.journal.entry import render_entry

    if not args:
        print(USAGE)
        return 1
    entry = _open_log(config).find(args[0])
    if entry is None:
        print(f"No task {args[0]} in {config.log.path}", file=sys.stderr)
        return 1
    sys.stdout.write(render_entry(entry))
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    cmd, args = (argv[0], argv[1:]) if argv else ("", [])

    config = load_config()
    _setup_logging(config.log_level)

    if cmd == "init":
        return _run_init(config)
    elif cmd == "append":
        return _run_append(config, args)
    elif cmd == "list":
        return _run_list(config)
    elif cmd == "show":
        return _run_show(config, args)
    elif cmd == "summary":
        sys.stdout.write(_open_log(config).update_progress_summary())
        return 0
    elif cmd == "next-id":
        print(_open_log(config).next_task_id())
        return 0
    else:
        print(USAGE)
        return 1


if __name__ == "__main__":
    sys.exit(main())
