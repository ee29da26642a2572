# backend/usergate/api/schemas.py

import re
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, StringConstraints, model_validator

from usergate.models.user import Role

PASSWORD_MIN_LENGTH = 8
EMAIL_MAX_LENGTH = 255


def _check_email_length(v: str) -> str:
    if len(v) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")
    return v


def _check_password_strength(v: str) -> str:
    if len(v) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one number")
    return v


Email = Annotated[EmailStr, AfterValidator(_check_email_length)]
Password = Annotated[str, AfterValidator(_check_password_strength)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]


# ---------- AUTH ----------

class SignupIn(BaseModel):
    email: Email
    password: Password
    name: Name


class LoginIn(BaseModel):
    email: Email
    password: str = Field(min_length=1)


# ---------- USERS (admin) ----------

class CreateUserIn(BaseModel):
    email: Email
    password: Password
    name: Name
    role: Role = Role.USER


class UpdateUserIn(BaseModel):
    name: Optional[Name] = None
    role: Optional[Role] = None

    @model_validator(mode="after")
    def _at_least_one(self):
        if self.name is None and self.role is None:
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> dict:
        out = self.model_dump(exclude_none=True)
        if "role" in out:
            out["role"] = out["role"].value
        return out


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: Role

    # ✅ DB returns datetime; camelCase on the wire
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")


def public_user(user) -> dict:
    return UserOut.model_validate(user).model_dump(mode="json", by_alias=True)
