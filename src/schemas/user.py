"""User schema definitions.

This module defines the User data model and the request/response bodies of
the authentication routes.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Literal, Optional

import pytz
from pydantic import BaseModel, Field

Role = Literal["developer", "admin", "teacher", "student", "parent", "accounting"]


class User(BaseModel):
    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: str(uuid.uuid4()),
    )
    email: str = Field(description="Login email, stored lowercased.")
    password_hash: str = Field(description="Bcrypt hash of the password.")
    first_name: str
    last_name: str
    role: Role
    school_id: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True
    created_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )
    updated_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def public_dict(self) -> Dict[str, Any]:
        """Return the user as a dict without the password hash."""
        data = self.model_dump()
        data.pop("password_hash", None)
        return data


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role: Role
    school_code: Optional[str] = Field(
        default=None,
        description="Join code of the user's school; validated when not blank.",
    )
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    admin_token: Optional[str] = Field(
        default=None,
        description="Required for developer and admin registration.",
    )


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    user: Dict[str, Any]
    token: str
    token_type: str = "bearer"


class CurrentUserResponse(BaseModel):
    user: Dict[str, Any]


class UpdateProfileRequest(BaseModel):
    """Fields a user may change on their own profile; omitted fields are kept."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    school_code: Optional[str] = None
