from storage.base import Storage
from storage.factory import create_storage

__all__ = ["Storage", "create_storage"]
