"""
QuillMind Backend — Authentication Schemas
============================================

What:  Bodies for POST /api/auth/register and POST /api/auth/login.

Blank-string checks live in AuthService so that a missing field and an
empty field produce the same 400 message.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(max_length=50)
    email: str = Field(max_length=255)
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    """Public view of a user. The password verifier is never included."""
    user_id: int
    username: str
    email: str
    created_at: datetime


class RegisterResponse(BaseModel):
    message: str = "User registered successfully!"
    user: UserResponse


class LoginResponse(BaseModel):
    message: str = "Login successful!"
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
