from __future__ import annotations

from sqlalchemy.orm import Session

from .auth.models import Admin


def is_bootstrapped(db: Session) -> bool:
    """
    Returns True once at least one admin exists.
    This is the single source of truth for "setup complete" detection.
    """
    return db.query(Admin).count() > 0
