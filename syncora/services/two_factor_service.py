"""
Two-Factor Authentication Service

Provides TOTP-based 2FA using the pyotp library. Enrollment is two-phase:
``enroll`` stores a fresh secret with enforcement still off, and
``verify_and_enable`` switches enforcement on only after the user proves
their authenticator produces matching codes.
"""

import base64
import logging
from datetime import datetime
from io import BytesIO

import pyotp
import qrcode

from syncora.config import settings
from syncora.exceptions import (
    InvalidTwoFactorTokenError,
    TwoFactorAlreadyEnabledError,
    TwoFactorNotInitializedError,
    UpstreamStoreError,
)
from syncora.models.user import User
from syncora.services.user_store import UserStore

logger = logging.getLogger(__name__)

# Accepted drift either side of the current 30 second step
DEFAULT_VALID_WINDOW = 2


def generate_secret() -> str:
    """Return a new random base32 secret."""
    return pyotp.random_base32()


def verify_totp(
    secret: str,
    code: str,
    valid_window: int = DEFAULT_VALID_WINDOW,
    for_time: datetime | int | None = None,
) -> bool:
    """
    Check a one-time code against a base32 secret.

    Pure and stateless: replay protection belongs to the caller. Codes
    from ``valid_window`` steps before or after ``for_time`` (default now)
    are accepted.
    """
    if not secret or not code:
        return False

    code = code.replace(" ", "").strip()
    if not code.isdigit():
        return False

    try:
        return pyotp.TOTP(secret).verify(code, for_time=for_time, valid_window=valid_window)
    except (ValueError, TypeError):
        # Malformed secret; treat as a failed verification
        logger.warning("TOTP verification attempted with a malformed secret")
        return False


def provisioning_uri(secret: str, email: str, issuer: str | None = None) -> str:
    """Build the otpauth:// URI authenticator apps scan."""
    return pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=issuer or settings.totp_issuer)


def render_qr_code(data: str) -> str:
    """Render ``data`` as a PNG QR code data URL."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format="PNG")

    encoded = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{encoded}"


class TwoFactorService:
    """Service for enrolling, confirming and disabling two-factor authentication."""

    def __init__(self, store: UserStore, valid_window: int | None = None):
        self.store = store
        self.valid_window = settings.totp_valid_window if valid_window is None else valid_window

    async def enroll(self, user: User) -> dict:
        """
        Generate and persist a fresh secret for ``user``.

        The enforcement flag is left off; a follow-up call to
        ``verify_and_enable`` turns it on.

        Returns:
            dict with the base32 secret and a QR code data URL
        """
        if user.two_factor_enabled:
            raise TwoFactorAlreadyEnabledError()

        secret = generate_secret()
        uri = provisioning_uri(secret, user.email)
        qr_code = render_qr_code(uri)

        updated = await self.store.update(user.id, two_factor_secret=secret, two_factor_enabled=False)
        if updated is None:
            raise UpstreamStoreError(message="User record disappeared during 2FA enrollment", operation="update")

        logger.info(f"2FA enrollment started for user {user.id}")

        return {"secret": secret, "qrCode": qr_code}

    async def verify_and_enable(self, user_id: str, code: str) -> None:
        """
        Confirm enrollment with a code from the authenticator.

        On failure the stored secret is kept, still disabled, so the user
        can retry or re-enroll.
        """
        user = await self.store.get_by_id(user_id)
        if user is None or not user.two_factor_secret:
            raise TwoFactorNotInitializedError()

        if not verify_totp(user.two_factor_secret, code, valid_window=self.valid_window):
            logger.warning(f"2FA enrollment confirmation failed for user {user_id}")
            raise InvalidTwoFactorTokenError(message="Invalid token")

        if not await self.store.enable_two_factor(user_id, user.two_factor_secret):
            logger.warning(f"2FA secret for user {user_id} changed during confirmation")
            raise InvalidTwoFactorTokenError(message="Invalid token")

        logger.info(f"2FA enabled for user {user_id}")

    async def disable(self, user_id: str) -> None:
        """Clear the secret and the flag in one update."""
        await self.store.update(user_id, two_factor_secret=None, two_factor_enabled=False)
        logger.info(f"2FA disabled for user {user_id}")
