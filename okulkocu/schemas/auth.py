# okulkocu/schemas/auth.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    school_code: Optional[str] = None


class LoginResult(BaseModel):
    """/user/login yanıtı; yanlış bilgide backend düz `false` döner."""
    model_config = ConfigDict(extra="ignore")

    token: str = Field(..., min_length=1)
    rol: str
    refreshToken: Optional[str] = None

    @field_validator("rol", mode="before")
    @classmethod
    def _rol_as_text(cls, v):
        # backend rolü bazen sayı olarak döndürüyor
        return None if v is None else str(v)


class TokenPair(BaseModel):
    """/auth/refresh yanıtı"""
    model_config = ConfigDict(extra="ignore")

    accessToken: str = Field(..., min_length=1)
    refreshToken: Optional[str] = None


class SessionView(BaseModel):
    isAuthenticated: bool
    status: str
    role: Optional[str] = None
    schoolCode: Optional[str] = None
