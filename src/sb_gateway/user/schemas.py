"""Auth request/response models.

The identity handed to the rest of the service is `UserInfo`: uid, email and
display name, plus the role and photographer availability the client needs
right after login.
"""

import re

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.sb_gateway.user.db_models import UserModel

# bcrypt only hashes the first 72 bytes
_BCRYPT_MAX_BYTES = 72

_PASSWORD_RULES = (
    (r"[A-Z]", "an uppercase letter"),
    (r"[a-z]", "a lowercase letter"),
    (r"\d", "a digit"),
)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=_BCRYPT_MAX_BYTES)
    display_name: str = Field("", max_length=128)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v.encode()) > _BCRYPT_MAX_BYTES:
            raise ValueError("Password is too long")
        for pattern, what in _PASSWORD_RULES:
            if not re.search(pattern, v):
                raise ValueError(f"Password must contain {what}")
        return v

    @field_validator("display_name")
    @classmethod
    def tidy_display_name(cls, v: str) -> str:
        # Empty means "use the username", see UserService.register
        return " ".join(v.split())


class LoginRequest(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class UserInfo(BaseModel):
    user_id: str
    username: str
    email: str
    display_name: str
    role: str
    is_accepting_requests: bool = True

    @classmethod
    def from_model(cls, user: UserModel) -> "UserInfo":
        return cls(
            user_id=str(user.id),
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            is_accepting_requests=user.is_accepting_requests,
        )


class RegisterResponse(BaseModel):
    user_id: str
    username: str
    email: str
    display_name: str
    created_at: str


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserInfo


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int
