"""
Authentication Routes

Password login with the optional second-factor step, signup, logout and
Google sign-in. A session cookie is only ever set once every required
factor has succeeded.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.auth import get_pending_auth_registry, get_user_store
from syncora.config import settings
from syncora.database import get_db
from syncora.exceptions import AuthenticationError, ServiceError
from syncora.middleware.rate_limit import limiter
from syncora.schemas.auth import (
    CompleteTwoFactorRequest,
    LoginRequest,
    PublicUser,
    SessionResponse,
    SignupRequest,
    SuccessResponse,
    TwoFactorChallengeResponse,
)
from syncora.services.auth_service import AuthService
from syncora.services.gemini_service import GeminiService, get_gemini_service
from syncora.services.oauth_service import GoogleOAuthClient, generate_state, get_google_oauth_client
from syncora.services.pending_auth import PendingAuthRegistry
from syncora.services.seed_service import seed_demo_data
from syncora.services.user_store import UserStore
from syncora.utils.session import SessionManager, clear_session_cookie, get_session_manager, set_session_cookie

logger = logging.getLogger(__name__)

router = APIRouter()

OAUTH_STATE_COOKIE = "syncora_oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60


def get_auth_service(
    store: UserStore = Depends(get_user_store),
    registry: PendingAuthRegistry = Depends(get_pending_auth_registry),
    sessions: SessionManager = Depends(get_session_manager),
) -> AuthService:
    return AuthService(store, registry, sessions)


# ============== Password Login ==============


@router.post("/login", response_model=SessionResponse | TwoFactorChallengeResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """
    Verify email and password.

    Accounts with 2FA enabled get ``{requires2FA: true, nonce}`` and no
    cookie; the nonce must be redeemed at ``/auth/2fa/complete``.
    """
    result = await service.login(payload.email, payload.password)

    if result.requires_two_factor:
        return TwoFactorChallengeResponse(nonce=result.nonce)

    set_session_cookie(response, result.session_id)
    return SessionResponse(user=PublicUser.model_validate(result.user))


@router.post("/2fa/complete", response_model=SessionResponse)
@limiter.limit(settings.login_rate_limit)
async def complete_two_factor(
    request: Request,
    response: Response,
    payload: CompleteTwoFactorRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Redeem a login nonce with a one-time code. The nonce is spent whatever the outcome."""
    result = await service.complete_two_factor(payload.nonce, payload.token)
    set_session_cookie(response, result.session_id)
    return SessionResponse(user=PublicUser.model_validate(result.user))


@router.post("/signup", response_model=SessionResponse)
@limiter.limit(settings.login_rate_limit)
async def signup(
    request: Request,
    response: Response,
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
    gemini: GeminiService = Depends(get_gemini_service),
):
    result = await service.signup(payload.email, payload.password)
    await seed_demo_data(db, result.user.id, gemini)

    set_session_cookie(response, result.session_id)
    return SessionResponse(user=PublicUser.model_validate(result.user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
):
    await service.logout(request.cookies.get(settings.session_cookie_name))
    clear_session_cookie(response)
    return SuccessResponse()


# ============== Google Sign-In ==============


@router.get("/google")
async def google_login(client: GoogleOAuthClient = Depends(get_google_oauth_client)):
    """Redirect to Google's consent page."""
    if not client.configured:
        raise ServiceError("Google sign-in is not configured", service="google_oauth", status_code=503)

    state = generate_state()
    redirect = RedirectResponse(client.authorization_url(state), status_code=302)
    redirect.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return redirect


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: str = Query(..., min_length=1),
    state: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    client: GoogleOAuthClient = Depends(get_google_oauth_client),
    service: AuthService = Depends(get_auth_service),
    gemini: GeminiService = Depends(get_gemini_service),
):
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not expected_state or state != expected_state:
        logger.warning("Google callback rejected: state mismatch")
        raise AuthenticationError("Google sign-in failed")

    profile = await client.fetch_profile(code)
    result = await service.login_with_oauth(profile)
    if result.created:
        await seed_demo_data(db, result.user.id, gemini)

    redirect = RedirectResponse("/dashboard", status_code=302)
    redirect.delete_cookie(OAUTH_STATE_COOKIE)
    set_session_cookie(redirect, result.session_id)
    return redirect
