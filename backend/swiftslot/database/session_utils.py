"""
Helpers for inspecting the dialect behind a SQLAlchemy session.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

# Dialects that honour SELECT ... FOR UPDATE
_ROW_LOCK_DIALECTS = frozenset({"postgresql", "mysql", "mariadb", "oracle"})


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """
    Return the SQLAlchemy dialect name of the session's bind.

    Falls back to ``default`` when the bound engine cannot be resolved.
    """
    bind = session.get_bind()
    dialect = getattr(bind, "dialect", None)
    return getattr(dialect, "name", None) or default


def supports_row_locks(session: Session) -> bool:
    """Whether ``with_for_update()`` takes a real row lock on this backend."""
    return get_dialect_name(session) in _ROW_LOCK_DIALECTS
