from typing import Literal

from pydantic import EmailStr, Field

from syncora.schemas import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class SignupRequest(CamelModel):
    email: EmailStr = Field(..., description="A valid email address.")
    password: str = Field(..., min_length=6, max_length=128, description="Password must be between 6 and 128 characters.")


class CompleteTwoFactorRequest(CamelModel):
    nonce: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1, max_length=16)


class VerifyTokenRequest(CamelModel):
    token: str = Field(..., min_length=1, max_length=16)


class PublicUser(CamelModel):
    """User fields that are safe to return to the client."""

    id: str
    email: str
    name: str | None = None


class CurrentUserResponse(PublicUser):
    profile_picture: str | None = None
    two_factor_enabled: bool = False


class SessionResponse(CamelModel):
    user: PublicUser


class TwoFactorChallengeResponse(CamelModel):
    requires_2fa: Literal[True] = Field(True, alias="requires2FA")
    nonce: str


class TwoFactorSetupResponse(CamelModel):
    secret: str
    qr_code: str


class SuccessResponse(CamelModel):
    success: bool = True
