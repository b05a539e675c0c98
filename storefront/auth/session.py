from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import Forbidden
from ..settings import settings
from .models import Admin, ROLE_SUPER_ADMIN
from .service import get_admin
from .tokens import TokenV1, verify_token

COOKIE_NAME = "admin-token"


def set_session(response, token: str):
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.app_env == "prod",
        samesite="strict",
    )


def clear_session(response):
    # Stateless tokens: the cookie goes away, the token itself stays valid until exp
    response.delete_cookie(COOKIE_NAME, path="/", httponly=True, samesite="strict")


def get_session_token(request: Request) -> str | None:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        if token:
            return token
    return request.cookies.get(COOKIE_NAME)


def require_admin(request: Request, db: Session = Depends(get_db)) -> TokenV1:
    return verify_token(db, get_session_token(request))


def current_admin(token: TokenV1 = Depends(require_admin), db: Session = Depends(get_db)) -> Admin:
    return get_admin(db, token.admin_id)


def require_super_admin(admin: Admin = Depends(current_admin)) -> Admin:
    if admin.role != ROLE_SUPER_ADMIN or not admin.is_active:
        raise Forbidden("Insufficient permissions")
    return admin
