from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LoginIn(BaseModel):
    username: str | None = None
    password: str | None = None


class ChangePasswordIn(BaseModel):
    current_password: str = ""
    new_password: str = ""


class LegacySecretIn(BaseModel):
    secret: str = ""


class AdminCreateIn(BaseModel):
    username: str = ""
    password: str = ""
    email: str | None = None
    role: str = "admin"


class AdminUpdateIn(BaseModel):
    is_active: bool | None = None
    email: str | None = None
    role: str | None = None


class AdminOut(BaseModel):
    """Admin as returned by the API. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str | None = None
    role: str | None = None
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def admin_out(a) -> dict:
    return AdminOut.model_validate(a).model_dump(mode="json")
