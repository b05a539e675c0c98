"""
Admin accounts: login, account management and the last-active-admin guard.

Routes call these functions and let StorefrontError subclasses propagate to
the error handlers.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, exists, or_, update
from sqlalchemy.orm import Session, aliased

from ..errors import (
    Conflict,
    InvalidCredentials,
    LastAdminProtected,
    MissingCredentials,
    NotFound,
    ValidationFailed,
)
from ..settings_service import get_legacy_secret, set_legacy_secret
from .models import Admin, ROLES, ROLE_ADMIN, ROLE_SUPER_ADMIN
from .passwords import hash_password, verify_password

log = logging.getLogger(__name__)

USERNAME_MIN = 3
USERNAME_MAX = 50
PASSWORD_MIN = 6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_admin(db: Session, admin_id: str) -> Admin:
    a = db.query(Admin).filter(Admin.id == admin_id).first()
    if not a:
        raise NotFound("Admin not found")
    return a


def list_admins(db: Session) -> list[Admin]:
    return db.query(Admin).order_by(Admin.created_at.desc()).all()


def earliest_active_admin(db: Session) -> Admin | None:
    return (
        db.query(Admin)
        .filter(Admin.is_active == True)  # noqa: E712
        .order_by(Admin.created_at.asc(), Admin.id.asc())
        .first()
    )


def active_admin_count(db: Session) -> int:
    return db.query(Admin).filter(Admin.is_active == True).count()  # noqa: E712


def authenticate(db: Session, username: str | None, password: str | None, now: datetime | None = None) -> Admin:
    """
    Resolve the acting admin from login credentials.

    With a username the password is checked against that active account.
    With a password alone the legacy shared secret is checked and the
    earliest-created active admin becomes the acting identity.
    """
    now = now or _utcnow()
    username = (username or "").strip()

    if not password:
        raise MissingCredentials("Username and password are required")

    if username:
        admin = (
            db.query(Admin)
            .filter(Admin.username == username, Admin.is_active == True)  # noqa: E712
            .first()
        )
        if not admin or not verify_password(password, admin.password_hash):
            log.warning("Failed login for username %r", username)
            raise InvalidCredentials("Invalid username or password")

        admin.last_login = now
        db.add(admin)
        db.commit()
        db.refresh(admin)
        log.info("Admin %s logged in", admin.username)
        return admin

    secret = get_legacy_secret(db)
    if not secret or not verify_password(password, secret.secret_hash):
        log.warning("Failed legacy password login")
        raise InvalidCredentials("Invalid password")

    admin = earliest_active_admin(db)
    if not admin:
        raise NotFound("Admin not found")

    if not admin.role:
        admin.role = ROLE_SUPER_ADMIN
        db.add(admin)
        db.commit()
        db.refresh(admin)
        log.info("Backfilled role %s for admin %s", ROLE_SUPER_ADMIN, admin.username)

    log.info("Legacy password login resolved to admin %s", admin.username)
    return admin


def _validate_password(password: str, field: str = "Password") -> None:
    if not password or len(password) < PASSWORD_MIN:
        raise ValidationFailed(f"{field} must be at least {PASSWORD_MIN} characters long")


def _normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


def create_admin(
    db: Session,
    username: str,
    password: str,
    email: str | None = None,
    role: str = ROLE_ADMIN,
) -> Admin:
    uname = (username or "").strip()
    if not uname or not password:
        raise ValidationFailed("Username and password are required")
    if len(uname) < USERNAME_MIN:
        raise ValidationFailed(f"Username must be at least {USERNAME_MIN} characters long")
    if len(uname) > USERNAME_MAX:
        raise ValidationFailed(f"Username cannot exceed {USERNAME_MAX} characters")
    _validate_password(password)
    if role not in ROLES:
        raise ValidationFailed("Invalid role")

    if db.query(Admin).filter(Admin.username == uname).first():
        raise Conflict("Username already exists")

    email = _normalize_email(email)
    if email and db.query(Admin).filter(Admin.email == email).first():
        raise Conflict("Email already exists")

    a = Admin(
        username=uname,
        password_hash=hash_password(password),
        email=email,
        role=role,
        is_active=True,
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    log.info("Created admin %s (%s)", a.username, a.role)
    return a


def _other_active_admin_exists(admin_id: str):
    other = aliased(Admin)
    return exists().where(other.is_active == True, other.id != admin_id)  # noqa: E712


def _keeps_a_super_admin(admin_id: str):
    """True for every row except the last active super admin."""
    other = aliased(Admin)
    return or_(
        Admin.is_active == False,  # noqa: E712
        Admin.role.is_(None),
        Admin.role != ROLE_SUPER_ADMIN,
        exists().where(
            other.is_active == True,  # noqa: E712
            other.role == ROLE_SUPER_ADMIN,
            other.id != admin_id,
        ),
    )


def _refusal(db: Session, admin_id: str, action: str) -> LastAdminProtected:
    if db.query(_other_active_admin_exists(admin_id)).scalar():
        return LastAdminProtected(f"Cannot {action} the last super admin")
    return LastAdminProtected(f"Cannot {action} the last active admin")


def _deactivate(db: Session, a: Admin) -> None:
    """Guarded UPDATE inside the caller's transaction; rolls back on refusal."""
    admin_id, username = a.id, a.username
    result = db.execute(
        update(Admin)
        .where(
            Admin.id == admin_id,
            Admin.is_active == True,  # noqa: E712
            _other_active_admin_exists(admin_id),
            _keeps_a_super_admin(admin_id),
        )
        .values(is_active=False, updated_at=_utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        log.warning("Refused to deactivate admin %s", username)
        raise _refusal(db, admin_id, "deactivate")


def _demote(db: Session, a: Admin, role: str) -> None:
    admin_id, username = a.id, a.username
    result = db.execute(
        update(Admin)
        .where(Admin.id == admin_id, _keeps_a_super_admin(admin_id))
        .values(role=role, updated_at=_utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        log.warning("Refused to demote last super admin %s", username)
        raise LastAdminProtected("Cannot demote the last super admin")


def deactivate_admin(db: Session, admin_id: str) -> Admin:
    """
    Deactivate an admin unless it is the last active one, or the last
    active super admin.

    The guard is part of the UPDATE itself so two concurrent requests cannot
    both pass a separate count check.
    """
    a = get_admin(db, admin_id)
    if not a.is_active:
        return a

    _deactivate(db, a)
    db.commit()
    db.refresh(a)
    log.info("Deactivated admin %s", a.username)
    return a


def activate_admin(db: Session, admin_id: str) -> Admin:
    a = get_admin(db, admin_id)
    if not a.is_active:
        a.is_active = True
        db.add(a)
        db.commit()
        db.refresh(a)
        log.info("Activated admin %s", a.username)
    return a


def delete_admin(db: Session, admin_id: str) -> None:
    a = get_admin(db, admin_id)
    username = a.username

    result = db.execute(
        delete(Admin)
        .where(
            Admin.id == admin_id,
            or_(Admin.is_active == False, _other_active_admin_exists(admin_id)),  # noqa: E712
            _keeps_a_super_admin(admin_id),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        log.warning("Refused to delete admin %s", username)
        raise _refusal(db, admin_id, "delete")

    # detach first so the caller's instance is not expired by the commit
    db.expunge(a)
    db.commit()
    log.info("Deleted admin %s", username)


def update_admin(
    db: Session,
    admin_id: str,
    is_active: bool | None = None,
    email: str | None = None,
    role: str | None = None,
) -> Admin:
    """
    Apply email, role and status changes in one transaction. When a guard
    refuses, none of the changes are kept.
    """
    a = get_admin(db, admin_id)
    if role is not None and role not in ROLES:
        raise ValidationFailed("Invalid role")

    if email is not None:
        email = _normalize_email(email)
        if email and db.query(Admin).filter(Admin.email == email, Admin.id != admin_id).first():
            raise Conflict("Email already exists")
        a.email = email
        db.add(a)
        db.flush()

    if role is not None and role != a.role:
        if a.role == ROLE_SUPER_ADMIN:
            _demote(db, a, role)
        else:
            a.role = role

    if is_active is False and a.is_active:
        _deactivate(db, a)
    elif is_active is True:
        a.is_active = True

    db.add(a)
    db.commit()
    db.refresh(a)
    log.info("Updated admin %s", a.username)
    return a


def change_password(db: Session, admin_id: str, current_password: str, new_password: str) -> Admin:
    if not current_password or not new_password:
        raise ValidationFailed("Current password and new password are required")
    _validate_password(new_password, "New password")

    a = get_admin(db, admin_id)
    if not verify_password(current_password, a.password_hash):
        raise ValidationFailed("Current password is incorrect")

    a.password_hash = hash_password(new_password)
    db.add(a)
    db.commit()
    db.refresh(a)
    log.info("Password changed for admin %s", a.username)
    return a


def rotate_legacy_secret(db: Session, new_secret: str) -> None:
    _validate_password(new_secret, "Legacy secret")
    set_legacy_secret(db, new_secret)
    log.info("Legacy admin secret rotated")
