"""Database helpers."""

from .session import connect, create_engine, create_session_maker
from .upsert import upsert

__all__ = ["connect", "create_engine", "create_session_maker", "upsert"]
