"""Pydantic schemas for sign-up / sign-in.

Learn: Pydantic v2 models validate request/response data. Unknown extra
fields in a request body are ignored (pydantic's default), never errors.
"""

from pydantic import BaseModel, EmailStr, Field


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class SigninRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
