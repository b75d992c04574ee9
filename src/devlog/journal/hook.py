"""Stop hook entry point: append one entry from a JSON record on stdin.

Usage (assistant stop hook):
    python -m devlog.journal.hook

The payload is a log entry mapping, optionally with a ``cwd`` key that
relative log paths resolve against. A retried hook with the same payload
appends nothing the second time.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from pathlib import Path

from devlog.config import DevlogConfig, load_config
from devlog.journal.entry import LogEntry
from devlog.journal.store import DevelopmentLog

logger = logging.getLogger(__name__)

PROCESSED_FILE = "processed"


def run(payload: str, config: DevlogConfig) -> str | None:
    """Append the entry in ``payload``. Returns the section, or None if skipped.

    Raises ``ValueError``/``TypeError`` for malformed payloads.
    """
    if not payload.strip():
        return None

    data = json.loads(payload)
    if not isinstance(data, dict):
        raise TypeError("hook payload must be a JSON object")
    cwd = data.pop("cwd", None)

    log_path = config.log.path
    if cwd and not log_path.is_absolute():
        log_path = Path(cwd) / log_path
    log = DevelopmentLog(
        log_path, title=config.log.title, keep_versions=config.log.keep_versions
    )

    # Idempotency: hash-based dedup
    content_hash = hashlib.sha256(payload.strip().encode()).hexdigest()[:16]
    processed_file = log.state_dir / PROCESSED_FILE
    if processed_file.exists():
        processed = processed_file.read_text(encoding="utf-8").splitlines()
        if content_hash in processed:
            logger.info("Payload %s already appended, skipping", content_hash)
            return None

    section = log.append(LogEntry.from_dict(data))

    processed_file.parent.mkdir(parents=True, exist_ok=True)
    with processed_file.open("a", encoding="utf-8") as f:
        f.write(content_hash + "\n")
    return section


def main() -> None:
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        run(sys.stdin.read(), config)
    except (ValueError, TypeError) as e:
        logger.error("Invalid log entry payload: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
