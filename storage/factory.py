import logging

from storage.base import Storage
from storage.database import DatabaseStorage
from storage.memory import MemoryStorage

logger = logging.getLogger(__name__)

BACKENDS = {
    "memory": MemoryStorage,
    "database": DatabaseStorage,
}


def select_backend(config) -> str:
    """
    STORAGE_BACKEND 가 명시되어 있으면 그대로,
    없으면 DATABASE_URL 유무 + USE_MEMORY_STORAGE 로 결정
    """
    explicit = (config.get("STORAGE_BACKEND") or "").strip().lower()
    if explicit:
        if explicit not in BACKENDS:
            raise ValueError(
                f"Unknown STORAGE_BACKEND '{explicit}', expected one of: {sorted(BACKENDS)}"
            )
        return explicit
    if config.get("DATABASE_URL") and not config.get("USE_MEMORY_STORAGE"):
        return "database"
    return "memory"


def create_storage(config) -> Storage:
    backend = select_backend(config)
    storage = BACKENDS[backend]()
    logger.info("storage backend selected: %s", backend)
    return storage
