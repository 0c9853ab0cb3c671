from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    # API payloads are camelCase; Python side uses snake_case.
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class User(_Wire):
    id: str | int
    email: str
    name: str | None = None
    email_verified: bool | None = Field(default=None, alias="emailVerified")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
    bio: str | None = None


class LoginResponse(_Wire):
    access_token: str = Field(alias="accessToken", min_length=1)
    user: User | None = None


class RefreshResponse(_Wire):
    access_token: str = Field(alias="accessToken", min_length=1)
    user: User | None = None


class MeResponse(_Wire):
    user: User


class SignupResponse(_Wire):
    user: User | None = None


class VerifyEmailResponse(_Wire):
    user: User | None = None
    redirect_url: str | None = Field(default=None, alias="redirectUrl")


class MessageResponse(_Wire):
    message: str | None = None
