"""
WellNest Backend — Authentication Schemas
"""

import uuid
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from app.schemas.common import CamelModel
from app.schemas.validators import RawSecret


class LoginRequest(CamelModel):
    email: EmailStr
    password: RawSecret = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class PrincipalResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    department: Optional[str] = None
    permissions: List[str]
    status: str


class TokenResponse(CamelModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    must_change_password: bool = False
    user: PrincipalResponse
