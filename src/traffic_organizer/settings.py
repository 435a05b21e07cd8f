"""Static configuration for traffic_organizer.

All user-editable settings (rule tables, medium names, session and logging
options) live in a single JSON file for quick edits without touching Python.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from typing import Any, Optional

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

# Rules and session options are loaded from config.json so they can be
# changed per site without editing code. TRAFFIC_ORGANIZER_CONFIG overrides it.
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")

# Default location of the SQLite session database when that backend is used.
DB_PATH = os.path.join(PROJECT_ROOT, "sessions.db")

STORE_BACKENDS = {"memory", "sqlite"}


@dataclass(frozen=True)
class Settings:
    """Parsed settings consumed by ``app.create_organizer``."""

    site_url: str
    rules: dict[str, Any]
    store_backend: str = "memory"
    db_path: str = DB_PATH
    logging: dict[str, Any] = field(default_factory=dict)


def load_json_config(path: str) -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Config file is not valid JSON: {path} ({exc})") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")
    return data


def resolve_path(path: str) -> str:
    """Resolve ``path`` against the project root unless it is absolute."""

    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


def load_settings(path: Optional[str] = None) -> Settings:
    """Read .env, then the JSON config, and return normalized settings."""

    load_dotenv()
    config_path = path or os.getenv("TRAFFIC_ORGANIZER_CONFIG") or CONFIG_PATH
    raw = load_json_config(config_path)

    # The site URL seeds the ignored referrers, so an environment override
    # lets one config file serve staging and production hosts.
    site_url = os.getenv("TRAFFIC_ORGANIZER_SITE_URL") or raw.get("site_url", "")

    store = raw.get("session", {}).get("store", {})
    backend = store.get("backend", "memory")
    if backend not in STORE_BACKENDS:
        raise ValueError(f"Unsupported session store backend: {backend}")

    return Settings(
        site_url=site_url,
        rules=raw,
        store_backend=backend,
        db_path=resolve_path(store.get("path", DB_PATH)),
        logging=raw.get("logging", {}),
    )
