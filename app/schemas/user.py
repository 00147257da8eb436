from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
import uuid


def normalize_email(value: str) -> str:
    return value.strip().lower()


class OtpRequest(BaseModel):
    """Schema for requesting a one-time passcode"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name required")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v


class OtpVerify(BaseModel):
    """Schema for verifying a one-time passcode"""
    email: EmailStr
    otp: str = Field(..., min_length=3, max_length=12)

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

    @field_validator("otp")
    @classmethod
    def strip_otp(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Invalid OTP")
        return v


class OtpSent(BaseModel):
    """Schema for the OTP dispatch acknowledgement"""
    message: str


class Token(BaseModel):
    """Schema for the session credential issued after verification"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: uuid.UUID
    name: str
    email: EmailStr


class TokenData(BaseModel):
    """Schema for token data"""
    user_id: Optional[str] = None
    email: Optional[str] = None
