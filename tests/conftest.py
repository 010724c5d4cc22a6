"""Shared test fixtures for SafeTour."""

import asyncio
import os
import pytest
from httpx import ASGITransport, AsyncClient


TOKEN_SECRET = "test-token-secret-for-unit-tests"
AUDIT_KEY = "test-audit-key-for-unit-tests"
PASSWORD = "correct-horse-battery"
TOURIST_WALLET = "0x52908400098527886E0F7030069857D2E4169EE7"


class FakeChainClient:
    """Records every call; optionally fails or stalls."""

    def __init__(self, tx_ref="0xabc123", error=None, delay=0.0, info=None):
        self.tx_ref = tx_ref
        self.error = error
        self.delay = delay
        self.info = info or {"wallet": TOURIST_WALLET, "isActive": True}
        self.calls = []
        self.lookups = []

    async def issue_identity(
        self, wallet_address, kyc_hash, itinerary_hash, emergency_contact, duration_seconds,
    ):
        self.calls.append({
            "wallet_address": wallet_address,
            "kyc_hash": kyc_hash,
            "itinerary_hash": itinerary_hash,
            "emergency_contact": emergency_contact,
            "duration_seconds": duration_seconds,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.tx_ref

    async def get_identity_info(self, tourist_id):
        self.lookups.append(tourist_id)
        if self.error:
            raise self.error
        return dict(self.info, touristId=tourist_id)


@pytest.fixture
def chain():
    return FakeChainClient()


@pytest.fixture
def app(chain):
    """Create a test app with in-memory DB and a fake chain client."""
    os.environ["SAFETOUR_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["SAFETOUR_TOKEN_SECRET"] = TOKEN_SECRET
    os.environ["SAFETOUR_AUDIT_HMAC_KEY"] = AUDIT_KEY
    os.environ["SAFETOUR_PASSWORD_HASH_ITERATIONS"] = "1000"
    os.environ["SAFETOUR_CHAIN_TIMEOUT"] = "0.5"

    # Clear caches and singletons so new env vars take effect
    from safetour.common.config import get_settings
    get_settings.cache_clear()

    from safetour.deps import reset_singletons, set_chain_client
    reset_singletons()
    set_chain_client(chain)

    from safetour.app import create_app
    return create_app()


@pytest.fixture
async def client(app):
    # Manually init DB since ASGITransport doesn't run lifespan
    from safetour.deps import get_db
    db = get_db()
    await db.init()
    await db.create_all()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await db.close()


async def _headers_for(client, email, role):
    resp = await client.post("/register", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 201
    if role != "tourist":
        from safetour.deps import get_db, get_identity_service
        async with get_db().get_session() as session:
            await get_identity_service().set_role(session, email, role)
        resp = await client.post("/login", json={"email": email, "password": PASSWORD})
        assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
async def tourist_headers(client):
    return await _headers_for(client, "tourist@example.com", "tourist")


@pytest.fixture
async def admin_headers(client):
    return await _headers_for(client, "admin@example.com", "admin")


@pytest.fixture
async def police_headers(client):
    return await _headers_for(client, "officer@example.com", "police")
