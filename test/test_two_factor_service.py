"""
Tests for TOTP verification and the enrollment lifecycle.
"""

import base64
from types import SimpleNamespace

import pyotp
import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.exceptions import InvalidTwoFactorTokenError, TwoFactorAlreadyEnabledError, TwoFactorNotInitializedError
from syncora.models.user import User
from syncora.services.two_factor_service import (
    TwoFactorService,
    generate_secret,
    provisioning_uri,
    render_qr_code,
    verify_totp,
)
from syncora.services.user_store import UserStore

STEP = 30
NOW = 1_700_000_000


class TestVerifyTotp:
    def test_current_code_accepted(self):
        secret = generate_secret()
        code = pyotp.TOTP(secret).at(NOW)

        assert verify_totp(secret, code, for_time=NOW) is True

    @pytest.mark.parametrize("steps", [-2, -1, 1, 2])
    def test_codes_within_window_accepted(self, steps):
        secret = generate_secret()
        code = pyotp.TOTP(secret).at(NOW + steps * STEP)

        assert verify_totp(secret, code, valid_window=2, for_time=NOW) is True

    @pytest.mark.parametrize("steps", [-3, 3])
    def test_codes_outside_window_rejected(self, steps):
        secret = generate_secret()
        totp = pyotp.TOTP(secret)
        code = totp.at(NOW + steps * STEP)
        # Skip the rare case where an out-of-window code collides with one inside it
        if any(code == totp.at(NOW + offset * STEP) for offset in range(-2, 3)):
            pytest.skip("code collision")

        assert verify_totp(secret, code, valid_window=2, for_time=NOW) is False

    def test_spaces_are_ignored(self):
        secret = generate_secret()
        code = pyotp.TOTP(secret).at(NOW)

        assert verify_totp(secret, f"{code[:3]} {code[3:]}", for_time=NOW) is True

    @pytest.mark.parametrize("code", ["", "abcdef", "12345a", None])
    def test_malformed_codes_rejected(self, code):
        assert verify_totp(generate_secret(), code, for_time=NOW) is False

    def test_missing_secret_rejected(self):
        assert verify_totp("", "123456", for_time=NOW) is False

    def test_malformed_secret_rejected(self):
        assert verify_totp("not base32!", "123456", for_time=NOW) is False


class TestProvisioning:
    def test_secret_is_base32(self):
        secret = generate_secret()

        assert len(secret) == 32
        base64.b32decode(secret)

    def test_provisioning_uri(self):
        uri = provisioning_uri("JBSWY3DPEHPK3PXP", "a@x.com", issuer="Syncora")

        assert uri.startswith("otpauth://totp/")
        assert "secret=JBSWY3DPEHPK3PXP" in uri
        assert "issuer=Syncora" in uri
        assert "a%40x.com" in uri or "a@x.com" in uri

    def test_qr_code_is_png_data_url(self):
        data_url = render_qr_code("otpauth://totp/Syncora:a@x.com?secret=JBSWY3DPEHPK3PXP")

        assert data_url.startswith("data:image/png;base64,")
        png = base64.b64decode(data_url.split(",", 1)[1])
        assert png[:8] == b"\x89PNG\r\n\x1a\n"


class TestTwoFactorService:
    async def test_enroll_stores_secret_disabled(self, test_db: AsyncSession, test_user: User):
        store = UserStore(test_db)
        service = TwoFactorService(store)

        result = await service.enroll(test_user)

        assert set(result) == {"secret", "qrCode"}
        user = await store.get_by_id(test_user.id)
        assert user.two_factor_secret == result["secret"]
        assert user.two_factor_enabled is False

    async def test_re_enroll_replaces_secret(self, test_db: AsyncSession, test_user: User):
        store = UserStore(test_db)
        service = TwoFactorService(store)

        first = await service.enroll(test_user)
        second = await service.enroll(test_user)

        assert first["secret"] != second["secret"]
        user = await store.get_by_id(test_user.id)
        assert user.two_factor_secret == second["secret"]

    async def test_enroll_when_enabled_rejected(self, test_db: AsyncSession, two_factor_user: User):
        service = TwoFactorService(UserStore(test_db))

        with pytest.raises(TwoFactorAlreadyEnabledError):
            await service.enroll(two_factor_user)

    async def test_verify_and_enable(self, test_db: AsyncSession, test_user: User):
        store = UserStore(test_db)
        service = TwoFactorService(store)
        secret = (await service.enroll(test_user))["secret"]

        await service.verify_and_enable(test_user.id, pyotp.TOTP(secret).now())

        user = await store.get_by_id(test_user.id)
        assert user.two_factor_enabled is True
        assert user.two_factor_secret == secret

    async def test_verify_with_wrong_code_keeps_disabled(self, test_db: AsyncSession, test_user: User):
        store = UserStore(test_db)
        service = TwoFactorService(store)
        secret = (await service.enroll(test_user))["secret"]
        wrong = str((int(pyotp.TOTP(secret).now()) + 500000) % 1000000).zfill(6)

        with pytest.raises(InvalidTwoFactorTokenError):
            await service.verify_and_enable(test_user.id, wrong)

        user = await store.get_by_id(test_user.id)
        assert user.two_factor_enabled is False
        assert user.two_factor_secret == secret

    async def test_verify_without_enrollment(self, test_db: AsyncSession, test_user: User):
        service = TwoFactorService(UserStore(test_db))

        with pytest.raises(TwoFactorNotInitializedError):
            await service.verify_and_enable(test_user.id, "123456")

    async def test_disable_clears_secret_and_flag(self, test_db: AsyncSession, two_factor_user: User):
        store = UserStore(test_db)
        service = TwoFactorService(store)

        await service.disable(two_factor_user.id)

        user = await store.get_by_id(two_factor_user.id)
        assert user.two_factor_enabled is False
        assert user.two_factor_secret is None

    async def test_secret_replaced_during_confirmation(self, test_db: AsyncSession, test_user: User, monkeypatch):
        store = UserStore(test_db)
        service = TwoFactorService(store)
        confirmed_secret = (await service.enroll(test_user))["secret"]
        read_user = store.get_by_id

        async def read_then_re_enroll(user_id):
            # Another enrollment lands after the secret was read
            user = await read_user(user_id)
            snapshot = SimpleNamespace(id=user.id, two_factor_secret=user.two_factor_secret)
            await test_db.execute(update(User).where(User.id == user_id).values(two_factor_secret=generate_secret()))
            await test_db.commit()
            return snapshot

        monkeypatch.setattr(store, "get_by_id", read_then_re_enroll)

        with pytest.raises(InvalidTwoFactorTokenError):
            await service.verify_and_enable(test_user.id, pyotp.TOTP(confirmed_secret).now())

        user = await read_user(test_user.id)
        assert user.two_factor_enabled is False
        assert user.two_factor_secret != confirmed_secret
