"""
Tests for the 2FA enrollment endpoints.
"""

import pyotp
from httpx import AsyncClient

from conftest import TEST_PASSWORD
from syncora.models.user import User


class TestEnrollmentRoutes:
    async def test_requires_authentication(self, client: AsyncClient):
        for path in ("/auth/2fa/enable", "/auth/2fa/verify", "/auth/2fa/disable"):
            response = await client.post(path, json={"token": "123456"})
            assert response.status_code == 401

    async def test_enable_returns_secret_and_qr(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/auth/2fa/enable")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"secret", "qrCode"}
        assert body["qrCode"].startswith("data:image/png;base64,")

    async def test_enable_does_not_enforce_yet(self, authenticated_client: AsyncClient):
        await authenticated_client.post("/auth/2fa/enable")

        me = await authenticated_client.get("/api/user")
        assert me.json()["twoFactorEnabled"] is False

        await authenticated_client.post("/auth/logout")
        login = await authenticated_client.post("/auth/login", json={"email": "a@x.com", "password": TEST_PASSWORD})
        assert "user" in login.json()

    async def test_verify_enables_and_next_login_is_challenged(self, authenticated_client: AsyncClient):
        secret = (await authenticated_client.post("/auth/2fa/enable")).json()["secret"]

        response = await authenticated_client.post("/auth/2fa/verify", json={"token": pyotp.TOTP(secret).now()})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert (await authenticated_client.get("/api/user")).json()["twoFactorEnabled"] is True

        await authenticated_client.post("/auth/logout")
        login = await authenticated_client.post("/auth/login", json={"email": "a@x.com", "password": TEST_PASSWORD})
        assert login.json()["requires2FA"] is True

    async def test_verify_invalid_token(self, authenticated_client: AsyncClient):
        secret = (await authenticated_client.post("/auth/2fa/enable")).json()["secret"]
        wrong = str((int(pyotp.TOTP(secret).now()) + 500000) % 1000000).zfill(6)

        response = await authenticated_client.post("/auth/2fa/verify", json={"token": wrong})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    async def test_verify_before_enable(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post("/auth/2fa/verify", json={"token": "123456"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "2FA not initialized"

    async def test_enable_when_already_enabled(self, client: AsyncClient, two_factor_user: User, totp_secret: str):
        nonce = (await client.post("/auth/login", json={"email": "b@x.com", "password": TEST_PASSWORD})).json()["nonce"]
        await client.post("/auth/2fa/complete", json={"nonce": nonce, "token": pyotp.TOTP(totp_secret).now()})

        response = await client.post("/auth/2fa/enable")

        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "AUTH_2FA_ALREADY_ENABLED"

    async def test_disable(self, client: AsyncClient, two_factor_user: User, totp_secret: str):
        nonce = (await client.post("/auth/login", json={"email": "b@x.com", "password": TEST_PASSWORD})).json()["nonce"]
        await client.post("/auth/2fa/complete", json={"nonce": nonce, "token": pyotp.TOTP(totp_secret).now()})

        response = await client.post("/auth/2fa/disable")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert (await client.get("/api/user")).json()["twoFactorEnabled"] is False

        await client.post("/auth/logout")
        login = await client.post("/auth/login", json={"email": "b@x.com", "password": TEST_PASSWORD})
        assert login.json()["user"]["id"] == two_factor_user.id
