from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from typing import Optional


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def email_must_look_like_an_address(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value


class UserLogin(UserCreate):
    pass


class BiometricLoginRequest(BaseModel):
    biometric_key: str = Field(min_length=1)


class BiometricKeyUpdate(BaseModel):
    user_id: str = Field(min_length=1)
    biometric_key: str = Field(min_length=1)


class MessageResponse(BaseModel):
    message: str


class UserDTO(BaseModel):
    """Outward projection of a user record. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    biometric_key: Optional[str] = None
    created_at: datetime
    access_token: Optional[str] = None


class ErrorResponse(BaseModel):
    message: str
    code: int
    path: str
    timestamp: str
