"""Configuration management for beads-lite.

Handles:
- .beads-lite/config.yaml parsing
- Environment variable overrides
- .beads-lite/ directory discovery
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import yaml

from beadslite.errors import ValidationError
from beadslite.id_gen import DEFAULT_ID_LENGTH, DEFAULT_PREFIX


CONFIG_YAML = "config.yaml"
BEADS_DIR = ".beads-lite"
DEFAULT_DB_NAME = "beads.db"

# Minimum hash suffix length accepted from config.yaml
MIN_ID_LENGTH = 3


@dataclass
class BeadsConfig:
    """User-facing config from config.yaml."""
    issue_prefix: str = DEFAULT_PREFIX
    db: str = DEFAULT_DB_NAME
    id_length: int = DEFAULT_ID_LENGTH
    json_output: bool = False

    @classmethod
    def load(cls, beads_dir: str) -> BeadsConfig:
        """Load config.yaml from the beads directory, then apply env overrides."""
        config_path = os.path.join(beads_dir, CONFIG_YAML)
        cfg = cls()
        if os.path.exists(config_path):
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            cfg.issue_prefix = data.get("issue-prefix", DEFAULT_PREFIX)
            cfg.db = data.get("db", DEFAULT_DB_NAME)
            cfg.id_length = _parse_id_length(data.get("id-length", DEFAULT_ID_LENGTH))
            cfg.json_output = bool(data.get("json", False))

        # Environment variable overrides
        if os.environ.get("BL_PREFIX"):
            cfg.issue_prefix = os.environ["BL_PREFIX"]
        if os.environ.get("BL_DB"):
            cfg.db = os.environ["BL_DB"]
        if os.environ.get("BL_JSON"):
            cfg.json_output = os.environ["BL_JSON"].lower() in ("1", "true", "yes")

        return cfg

    def save(self, beads_dir: str) -> None:
        """Save config to config.yaml."""
        config_path = os.path.join(beads_dir, CONFIG_YAML)
        data: dict[str, Any] = {"issue-prefix": self.issue_prefix}
        if self.db != DEFAULT_DB_NAME:
            data["db"] = self.db
        if self.id_length != DEFAULT_ID_LENGTH:
            data["id-length"] = self.id_length
        if self.json_output:
            data["json"] = self.json_output

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)


def _parse_id_length(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"config {CONFIG_YAML}: id-length must be an integer, got {value!r}")
    if value < MIN_ID_LENGTH:
        raise ValidationError(
            f"config {CONFIG_YAML}: id-length must be at least {MIN_ID_LENGTH}, got {value}")
    return value


def find_beads_dir(start: str | None = None) -> str | None:
    """Walk up from start directory to find .beads-lite/ directory.

    Returns absolute path to .beads-lite/ directory, or None if not found.
    """
    if start is None:
        start = os.getcwd()
    current = os.path.abspath(start)
    while True:
        candidate = os.path.join(current, BEADS_DIR)
        if os.path.isdir(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def get_db_path(beads_dir: str, config: BeadsConfig | None = None) -> str:
    """Get the full path to the SQLite database."""
    db = config.db if config and config.db else DEFAULT_DB_NAME
    if os.path.isabs(db):
        return db
    return os.path.join(beads_dir, db)
