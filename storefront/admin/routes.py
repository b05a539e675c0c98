from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.schemas import AdminCreateIn, AdminUpdateIn, admin_out
from ..auth.service import create_admin, delete_admin, get_admin, list_admins, update_admin
from ..auth.session import require_admin, require_super_admin

# Any admin can read the list; only super admins manage accounts
router = APIRouter(prefix="/api/admin/users", dependencies=[Depends(require_admin)])


@router.get("")
def admins_list(db: Session = Depends(get_db)):
    return {"success": True, "data": [admin_out(a) for a in list_admins(db)]}


@router.post("", status_code=201, dependencies=[Depends(require_super_admin)])
def admins_create(body: AdminCreateIn, db: Session = Depends(get_db)):
    a = create_admin(db, body.username, body.password, email=body.email, role=body.role)
    return {"success": True, "data": admin_out(a), "message": "Admin user created successfully"}


@router.get("/{admin_id}")
def admins_get(admin_id: str, db: Session = Depends(get_db)):
    return {"success": True, "data": admin_out(get_admin(db, admin_id))}


@router.put("/{admin_id}", dependencies=[Depends(require_super_admin)])
def admins_update(admin_id: str, body: AdminUpdateIn, db: Session = Depends(get_db)):
    a = update_admin(db, admin_id, is_active=body.is_active, email=body.email, role=body.role)
    return {"success": True, "data": admin_out(a), "message": "Admin user updated successfully"}


@router.delete("/{admin_id}", dependencies=[Depends(require_super_admin)])
def admins_delete(admin_id: str, db: Session = Depends(get_db)):
    delete_admin(db, admin_id)
    return {"success": True, "message": "Admin user deleted successfully"}
