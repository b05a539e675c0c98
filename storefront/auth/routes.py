from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from .models import Admin
from .schemas import ChangePasswordIn, LegacySecretIn, LoginIn, admin_out
from .service import authenticate, change_password, rotate_legacy_secret
from .session import clear_session, current_admin, set_session
from .tokens import issue_token

router = APIRouter(prefix="/api/admin")


@router.post("/login")
def login(body: LoginIn, db: Session = Depends(get_db)):
    admin = authenticate(db, body.username, body.password)
    token = issue_token(admin.id, admin.username)

    resp = JSONResponse({
        "success": True,
        "data": {"token": token, "admin": admin_out(admin), "message": "Login successful"},
    })
    set_session(resp, token)
    return resp


@router.delete("/login")
def logout():
    resp = JSONResponse({"success": True, "message": "Logout successful"})
    clear_session(resp)
    return resp


@router.get("/me")
def me(admin: Admin = Depends(current_admin)):
    return {"success": True, "data": admin_out(admin)}


@router.put("/change-password")
def change_password_put(
    body: ChangePasswordIn,
    admin: Admin = Depends(current_admin),
    db: Session = Depends(get_db),
):
    change_password(db, admin.id, body.current_password, body.new_password)
    return {"success": True, "message": "Password updated successfully"}


@router.put("/legacy-secret")
def legacy_secret_put(
    body: LegacySecretIn,
    admin: Admin = Depends(current_admin),
    db: Session = Depends(get_db),
):
    rotate_legacy_secret(db, body.secret)
    return {"success": True, "message": "Legacy secret updated"}
