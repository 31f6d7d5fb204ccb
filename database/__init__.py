"""
Entity store package

STORE_BACKEND=memory  -> InMemoryClubStore (default, tests)
STORE_BACKEND=supabase -> SupabaseClubStore
"""
from typing import Optional

from loguru import logger

from app.config import get_settings

from .store import ClubStore
from .memory_store import InMemoryClubStore

_store: Optional[ClubStore] = None


def create_store(backend: str) -> ClubStore:
    """Build a store for the named backend"""
    if backend == "memory":
        return InMemoryClubStore()
    if backend == "supabase":
        from .supabase_client import SupabaseClubStore
        return SupabaseClubStore()
    raise ValueError(f"unknown STORE_BACKEND: {backend!r} (memory | supabase)")


def get_store() -> ClubStore:
    """Process-wide store (싱글톤)"""
    global _store
    if _store is None:
        backend = get_settings().STORE_BACKEND
        _store = create_store(backend)
        logger.info(f"Entity store backend: {backend}")
    return _store


__all__ = ["ClubStore", "InMemoryClubStore", "create_store", "get_store"]
