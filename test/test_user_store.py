"""
Tests for the credential store.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from syncora.exceptions import UpstreamStoreError
from syncora.models.user import User
from syncora.services.user_store import UserStore, normalize_email


class TestUserStore:
    async def test_lookups(self, test_db: AsyncSession):
        store = UserStore(test_db)
        user = await store.create(email="s@x.com", name="S", google_id="g-9")

        assert (await store.get_by_id(user.id)).email == "s@x.com"
        assert (await store.get_by_email("s@x.com")).id == user.id
        assert (await store.get_by_google_id("g-9")).id == user.id
        assert await store.get_by_email("missing@x.com") is None

    async def test_new_user_defaults(self, test_db: AsyncSession):
        user = await UserStore(test_db).create(email="d@x.com")

        assert len(user.id) == 36
        assert user.two_factor_enabled is False
        assert user.two_factor_secret is None
        assert user.created_at is not None

    async def test_update_is_partial(self, test_db: AsyncSession, test_user: User):
        store = UserStore(test_db)
        original_hash = test_user.hashed_password

        updated = await store.update(test_user.id, name="New Name")

        assert updated.name == "New Name"
        assert updated.hashed_password == original_hash

    async def test_update_unknown_field(self, test_db: AsyncSession, test_user: User):
        with pytest.raises(ValueError):
            await UserStore(test_db).update(test_user.id, id="other")

    async def test_update_missing_user(self, test_db: AsyncSession):
        assert await UserStore(test_db).update("missing", name="x") is None

    async def test_duplicate_email_is_store_error(self, test_db: AsyncSession, test_user: User):
        with pytest.raises(UpstreamStoreError):
            await UserStore(test_db).create(email="a@x.com")

    async def test_email_domain_is_case_insensitive(self, test_db: AsyncSession):
        store = UserStore(test_db)
        user = await store.create(email=" Kim@Example.COM ")

        assert user.email == "Kim@example.com"
        assert (await store.get_by_email("Kim@EXAMPLE.com")).id == user.id
        assert await store.get_by_email("kim@example.com") is None

    async def test_enable_two_factor_requires_current_secret(self, test_db: AsyncSession, test_user: User):
        store = UserStore(test_db)
        await store.update(test_user.id, two_factor_secret="JBSWY3DPEHPK3PXP")

        assert await store.enable_two_factor(test_user.id, "KRSXG5CTMVRXEZLU") is False
        assert (await store.get_by_id(test_user.id)).two_factor_enabled is False

        assert await store.enable_two_factor(test_user.id, "JBSWY3DPEHPK3PXP") is True
        assert (await store.get_by_id(test_user.id)).two_factor_enabled is True


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("a@x.com", "a@x.com"),
        ("Kim@Example.COM", "Kim@example.com"),
        ("  b@X.org\n", "b@x.org"),
        ("no-at-sign", "no-at-sign"),
    ],
)
def test_normalize_email(raw, expected):
    assert normalize_email(raw) == expected
