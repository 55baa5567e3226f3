"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request schema for email and password login."""

    email: str = Field(..., description="Login email address")
    password: str = Field(..., description="Account password")


class TokenResponse(BaseModel):
    """Access token issued after a successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user_id: str = Field(..., description="Identity ID")


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    error: str = Field(..., description="Machine-readable error kind")
    message: str = Field(..., description="Human-readable message")
    details: list | dict | None = Field(None, description="Additional error payload")
