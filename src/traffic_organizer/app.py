"""Application wiring for the traffic organizer.

Hosts call ``configure_logging`` once at startup and ``create_organizer`` per
visitor (or per request) to get a tracker bound to the configured store.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from traffic_organizer import settings as settings_module
from traffic_organizer.adapters.memory_store import MemorySessionStore
from traffic_organizer.adapters.sqlite_store import SQLiteSessionStore
from traffic_organizer.core.ports import SessionStore
from traffic_organizer.core.rules_engine import build_configuration
from traffic_organizer.core.tracker import TrafficOrganizer
from traffic_organizer.settings import Settings

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Handlers go on the package logger; the root logger belongs to the host.
PACKAGE_LOGGER = "traffic_organizer"


def configure_logging(config: Optional[dict]) -> None:
    """Install console and rotating file handlers from the ``logging`` section.

    Calling it again replaces the handlers from the previous call. Records
    reach the host's root handlers only when ``propagate`` is true.
    """

    config = config or {}
    if not config.get("enabled", False):
        return

    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = settings_module.resolve_path(file_cfg.get("path", "logs/traffic_organizer.log"))
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        handlers.append(
            _rotating_handler(
                path,
                int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
                int(file_cfg.get("backup_count", 5)),
                formatter,
            )
        )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.setLevel(level)
    package_logger.propagate = bool(config.get("propagate", False))
    for handler in handlers:
        handler.setLevel(level)
        package_logger.addHandler(handler)


def _rotating_handler(path: str, max_bytes: int, backup_count: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(formatter)
    return handler


def _build_store(settings: Settings, visitor_id: Optional[str]) -> SessionStore:
    if settings.store_backend == "memory":
        return MemorySessionStore()
    if settings.store_backend == "sqlite":
        if not visitor_id:
            raise RuntimeError("visitor_id is required when session.store.backend=sqlite")
        store = SQLiteSessionStore(settings.db_path, visitor_id)
        store.init_db()
        return store
    raise RuntimeError("session.store.backend must be 'memory' or 'sqlite'")


def create_organizer(
    settings: Settings,
    visitor_id: Optional[str] = None,
    store: Optional[SessionStore] = None,
) -> TrafficOrganizer:
    """Build a tracker from settings.

    An explicit ``store`` (for example a ``CookieSessionStore`` for the
    current request) takes precedence over the configured backend.
    """

    config = build_configuration(settings.rules, site_url=settings.site_url)
    if store is None:
        store = _build_store(settings, visitor_id)
    LOGGER.debug(
        "Organizer ready: %s search engines, %s referrer groups, %s keyword groups",
        len(config.search_engines),
        len(config.referrer_groups),
        len(config.keyword_groups),
    )
    return TrafficOrganizer(config, store)
