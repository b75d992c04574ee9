"""Configuration loading from environment variables and devlog.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_LOG_FILE = Path("DEVELOPMENT_LOG.md")
_DEFAULT_RULE_FILE = Path(".cursor") / "rules" / "development-log.mdc"
_CONFIG_FILENAME = "devlog.toml"


@dataclass
class LogConfig:
    """Where the development log lives and how it is maintained."""

    path: Path = _DEFAULT_LOG_FILE
    title: str = "Development Log"
    keep_versions: int = 10


@dataclass
class RuleConfig:
    """Instruction artifact written for the assistant host."""

    path: Path = _DEFAULT_RULE_FILE
    priority: str = "high"
    always_apply: bool = True


@dataclass
class DevlogConfig:
    """Top-level devlog configuration."""

    log: LogConfig = field(default_factory=LogConfig)
    rule: RuleConfig = field(default_factory=RuleConfig)
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> DevlogConfig:
    """Load configuration from environment variables and optional devlog.toml.

    Priority: environment variables > devlog.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".devlog" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    log_data = file_data.get("log", {})
    rule_data = file_data.get("rule", {})

    return DevlogConfig(
        log=LogConfig(
            path=Path(os.getenv("DEVLOG_FILE", log_data.get("path", str(_DEFAULT_LOG_FILE)))),
            title=os.getenv("DEVLOG_TITLE", log_data.get("title", "Development Log")),
            keep_versions=int(
                os.getenv("DEVLOG_KEEP_VERSIONS", log_data.get("keep_versions", 10))
            ),
        ),
        rule=RuleConfig(
            path=Path(
                os.getenv("DEVLOG_RULE_FILE", rule_data.get("path", str(_DEFAULT_RULE_FILE)))
            ),
            priority=str(rule_data.get("priority", "high")),
            always_apply=bool(rule_data.get("always_apply", True)),
        ),
        log_level=os.getenv("DEVLOG_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
