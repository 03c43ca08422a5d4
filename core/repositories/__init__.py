"""
Storage selection.

The backend is chosen once at startup: PostgreSQL when DATABASE_URL is set
and reachable, otherwise an in-process store. Callers only ever use
get_repository() and never learn which backend answered.
"""

import logging

from core.config import is_dev_mode
from core.database import is_configured, ping_database

from .base import UPDATABLE_SCHEDULE_FIELDS, Repository
from .memory import MemoryRepository
from .sql import SqlRepository

logger = logging.getLogger(__name__)

_repository: Repository | None = None


async def init_repository() -> Repository:
    """Pick the storage backend. Call once during app startup."""
    global _repository

    if _repository is not None:
        return _repository

    if is_configured() and await ping_database():
        _repository = SqlRepository()
        logger.info("Using PostgreSQL repository")
    else:
        logger.warning("Database not available, using in-memory repository")
        _repository = (
            MemoryRepository.with_demo_data() if is_dev_mode() else MemoryRepository()
        )

    return _repository


def get_repository() -> Repository:
    if _repository is None:
        raise RuntimeError("Repository not initialized, call init_repository() first")
    return _repository


def set_repository(repository: Repository | None) -> None:
    """Install a specific backend (tests, scripts)."""
    global _repository
    _repository = repository


__all__ = [
    "Repository",
    "MemoryRepository",
    "SqlRepository",
    "UPDATABLE_SCHEDULE_FIELDS",
    "init_repository",
    "get_repository",
    "set_repository",
]
