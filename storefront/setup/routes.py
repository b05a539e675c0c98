from fastapi import HTTPException, APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..bootstrap import is_bootstrapped
from ..db import get_db
from ..settings import settings
from ..settings_service import set_legacy_secret
from ..auth.models import ROLE_SUPER_ADMIN
from ..auth.schemas import admin_out
from ..auth.service import create_admin


def setup_guard(token: str | None = Query(default=None), db: Session = Depends(get_db)):
    # If already bootstrapped, setup must disappear completely
    if is_bootstrapped(db):
        raise HTTPException(status_code=404)

    # If SETUP_TOKEN is configured, enforce it
    if settings.setup_token:
        if token != settings.setup_token:
            raise HTTPException(status_code=404)


router = APIRouter(dependencies=[Depends(setup_guard)])


class SetupIn(BaseModel):
    username: str = ""
    password: str = ""
    email: str | None = None
    # Optional shared secret for password-only logins
    legacy_secret: str | None = None


@router.post("/setup", status_code=201)
def setup_post(body: SetupIn, db: Session = Depends(get_db)):
    admin = create_admin(db, body.username, body.password, email=body.email, role=ROLE_SUPER_ADMIN)
    if body.legacy_secret:
        set_legacy_secret(db, body.legacy_secret)
    return {"success": True, "data": admin_out(admin), "message": "Setup complete. Please log in."}
