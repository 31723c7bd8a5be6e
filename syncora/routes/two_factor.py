"""
Two-Factor Authentication Routes

Enrollment (enable then verify) and disabling for the signed-in user.
"""

from fastapi import APIRouter, Depends

from syncora.auth import get_current_user, get_user_store
from syncora.models.user import User
from syncora.schemas.auth import SuccessResponse, TwoFactorSetupResponse, VerifyTokenRequest
from syncora.services.two_factor_service import TwoFactorService
from syncora.services.user_store import UserStore

router = APIRouter()


@router.post("/enable", response_model=TwoFactorSetupResponse)
async def enable_2fa(
    current_user: User = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
):
    """
    Start enrollment.

    Returns a secret and QR code for the authenticator app; 2FA is not
    enforced until ``/verify`` succeeds.
    """
    service = TwoFactorService(store)
    return await service.enroll(current_user)


@router.post("/verify", response_model=SuccessResponse)
async def verify_2fa(
    payload: VerifyTokenRequest,
    current_user: User = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
):
    service = TwoFactorService(store)
    await service.verify_and_enable(current_user.id, payload.token)
    return SuccessResponse()


@router.post("/disable", response_model=SuccessResponse)
async def disable_2fa(
    current_user: User = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
):
    service = TwoFactorService(store)
    await service.disable(current_user.id)
    return SuccessResponse()
