"""
Signed admin session tokens.

A token is an itsdangerous-signed JSON payload carrying the admin identity
and its own issue/expiry timestamps, so validity is re-derived from the
token alone on every request. Two payload shapes exist:

- TokenV1: current format, carries ``admin_id``.
- TokenLegacy: issued before per-user logins existed, no ``admin_id``.

verify_token() upgrades a TokenLegacy to a TokenV1 by resolving the
earliest-created active admin. That binding is weaker than a real identity
claim and is logged every time it happens.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from itsdangerous import BadSignature, URLSafeSerializer
from sqlalchemy.orm import Session

from ..errors import InvalidOrExpiredToken, MissingToken, NotAdmin
from ..settings import settings
from .service import earliest_active_admin

log = logging.getLogger(__name__)

TOKEN_SALT = "admin-session"


@dataclass(frozen=True)
class TokenV1:
    admin_id: str
    username: str
    iat: int
    exp: int
    is_admin: bool = True


@dataclass(frozen=True)
class TokenLegacy:
    username: str | None
    iat: int
    exp: int
    is_admin: bool = True


def _serializer() -> URLSafeSerializer:
    return URLSafeSerializer(settings.session_secret, salt=TOKEN_SALT)


def _timestamp(now: datetime | None) -> int:
    return int((now or datetime.now(timezone.utc)).timestamp())


def sign_payload(payload: dict) -> str:
    return _serializer().dumps(payload)


def issue_token(admin_id: str, username: str, now: datetime | None = None) -> str:
    iat = _timestamp(now)
    return sign_payload({
        "admin_id": str(admin_id),
        "username": username,
        "is_admin": True,
        "iat": iat,
        "exp": iat + settings.session_ttl_seconds,
    })


def parse_token(token: str | None, now: datetime | None = None) -> TokenV1 | TokenLegacy:
    """Check signature, expiry and admin assertion without touching the database."""
    if not token:
        raise MissingToken()

    try:
        data = _serializer().loads(token)
    except BadSignature:
        raise InvalidOrExpiredToken()

    if not isinstance(data, dict):
        raise InvalidOrExpiredToken()

    try:
        iat = int(data.get("iat", 0))
        exp = int(data["exp"])
    except (KeyError, TypeError, ValueError):
        raise InvalidOrExpiredToken()

    if _timestamp(now) > exp:
        raise InvalidOrExpiredToken()

    if data.get("is_admin") is not True:
        raise NotAdmin()

    if not data.get("admin_id"):
        return TokenLegacy(username=data.get("username"), iat=iat, exp=exp)

    return TokenV1(
        admin_id=str(data["admin_id"]),
        username=str(data.get("username") or ""),
        iat=iat,
        exp=exp,
    )


def verify_token(db: Session, token: str | None, now: datetime | None = None) -> TokenV1:
    t = parse_token(token, now=now)
    if isinstance(t, TokenV1):
        return t

    admin = earliest_active_admin(db)
    if not admin:
        raise InvalidOrExpiredToken()

    log.info("Old-format admin token mapped to admin %s", admin.username)
    return TokenV1(admin_id=admin.id, username=admin.username, iat=t.iat, exp=t.exp)
