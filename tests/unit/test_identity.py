"""Tests for the credential store: registration, lookup and authentication."""

import pytest

from safetour.common.config import SafeTourSettings
from safetour.common.database import DatabaseManager
from safetour.common.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from safetour.identity.service import IdentityService


TOKEN_SECRET = "test-token-secret-for-unit-tests"
WALLET = "0x52908400098527886E0F7030069857D2E4169EE7"


def make_settings(**overrides) -> SafeTourSettings:
    defaults = {
        "token_secret": TOKEN_SECRET,
        "db_url": "sqlite+aiosqlite://",
        "password_hash_iterations": 1000,
    }
    defaults.update(overrides)
    return SafeTourSettings(**defaults)


@pytest.fixture
async def db():
    manager = DatabaseManager(make_settings())
    await manager.init()
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def svc():
    return IdentityService(make_settings())


class TestRegister:
    async def test_register_defaults_to_tourist(self, db, svc):
        async with db.get_session() as session:
            identity = await svc.register(session, "Ana@Example.com", "password123")
            assert identity.id is not None
            assert identity.role == "tourist"
            assert identity.email == "ana@example.com"
            assert identity.created_at is not None

    async def test_password_stored_hashed(self, db, svc):
        async with db.get_session() as session:
            identity = await svc.register(session, "a@example.com", "password123")
            assert identity.password_hash != "password123"
            assert "password123" not in identity.password_hash

    async def test_wallet_checksummed(self, db, svc):
        async with db.get_session() as session:
            identity = await svc.register(
                session, "w@example.com", "password123", wallet_address=WALLET.lower(),
            )
            assert identity.wallet_address == WALLET

    async def test_wallet_optional(self, db, svc):
        async with db.get_session() as session:
            identity = await svc.register(session, "nw@example.com", "password123")
            assert identity.wallet_address is None

    async def test_bad_wallet_rejected(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(ValidationError):
                await svc.register(
                    session, "bw@example.com", "password123", wallet_address="0x1234",
                )

    @pytest.mark.parametrize("email", ["", "no-at-sign", "@example.com", "a@nodot"])
    async def test_bad_email_rejected(self, db, svc, email):
        async with db.get_session() as session:
            with pytest.raises(ValidationError):
                await svc.register(session, email, "password123")

    async def test_short_password_rejected(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(ValidationError):
                await svc.register(session, "short@example.com", "1234567")

    async def test_duplicate_email_conflicts(self, db, svc):
        async with db.get_session() as session:
            await svc.register(session, "dup@example.com", "password123")
        async with db.get_session() as session:
            with pytest.raises(ConflictError):
                await svc.register(session, "DUP@example.com ", "otherpass123")


class TestLookup:
    async def test_find_by_email_case_insensitive(self, db, svc):
        async with db.get_session() as session:
            created = await svc.register(session, "find@example.com", "password123")
        async with db.get_session() as session:
            found = await svc.find_by_email(session, "FIND@EXAMPLE.COM")
            assert found is not None
            assert found.id == created.id

    async def test_find_by_id(self, db, svc):
        async with db.get_session() as session:
            created = await svc.register(session, "id@example.com", "password123")
        async with db.get_session() as session:
            found = await svc.find_by_id(session, created.id)
            assert found.email == "id@example.com"

    async def test_not_found(self, db, svc):
        async with db.get_session() as session:
            assert await svc.find_by_email(session, "nobody@example.com") is None
            assert await svc.find_by_id(session, "no-id") is None


class TestAuthenticate:
    async def test_register_then_login(self, db, svc):
        async with db.get_session() as session:
            created = await svc.register(session, "login@example.com", "password123")
        async with db.get_session() as session:
            identity = await svc.authenticate(session, "login@example.com", "password123")
            assert identity.id == created.id

    async def test_wrong_password(self, db, svc):
        async with db.get_session() as session:
            await svc.register(session, "wp@example.com", "password123")
        async with db.get_session() as session:
            with pytest.raises(UnauthenticatedError) as exc:
                await svc.authenticate(session, "wp@example.com", "password124")
            assert exc.value.message == "Invalid credentials"

    async def test_unknown_email_same_error(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(UnauthenticatedError) as exc:
                await svc.authenticate(session, "ghost@example.com", "password123")
            assert exc.value.message == "Invalid credentials"

    async def test_unknown_email_still_checks_a_hash(self, db, svc, monkeypatch):
        import safetour.identity.service as identity_service

        checked = []
        real_verify = identity_service.verify_password

        def counting_verify(password, stored):
            checked.append(stored)
            return real_verify(password, stored)

        monkeypatch.setattr(identity_service, "verify_password", counting_verify)
        async with db.get_session() as session:
            with pytest.raises(UnauthenticatedError):
                await svc.authenticate(session, "ghost@example.com", "password123")
        assert len(checked) == 1
        assert checked[0].startswith("pbkdf2:sha256:1000$")


class TestSetRole:
    async def test_promote(self, db, svc):
        async with db.get_session() as session:
            await svc.register(session, "cop@example.com", "password123")
        async with db.get_session() as session:
            identity = await svc.set_role(session, "cop@example.com", "police")
            assert identity.role == "police"

    async def test_unknown_role(self, db, svc):
        async with db.get_session() as session:
            await svc.register(session, "r@example.com", "password123")
            with pytest.raises(ValidationError):
                await svc.set_role(session, "r@example.com", "root")

    async def test_unknown_identity(self, db, svc):
        async with db.get_session() as session:
            with pytest.raises(NotFoundError):
                await svc.set_role(session, "ghost@example.com", "admin")
