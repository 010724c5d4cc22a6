"""Tests for the operator CLI."""

import os

import pytest
from typer.testing import CliRunner

from safetour.cli import app


runner = CliRunner()


@pytest.fixture
def file_db(tmp_path):
    os.environ["SAFETOUR_DB_URL"] = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    os.environ["SAFETOUR_TOKEN_SECRET"] = "test-token-secret-for-unit-tests"
    os.environ["SAFETOUR_AUDIT_HMAC_KEY"] = "test-audit-key-for-unit-tests"
    os.environ["SAFETOUR_PASSWORD_HASH_ITERATIONS"] = "1000"

    from safetour.common.config import get_settings
    get_settings.cache_clear()
    from safetour.deps import reset_singletons
    reset_singletons()
    yield
    reset_singletons()


def _register(email):
    import asyncio
    from safetour.deps import get_db, get_identity_service

    async def _run():
        db = get_db()
        await db.init()
        await db.create_all()
        try:
            async with db.get_session() as session:
                await get_identity_service().register(session, email, "password123")
        finally:
            await db.close()

    asyncio.run(_run())


class TestPromote:
    def test_promote_existing(self, file_db):
        _register("chief@example.com")
        result = runner.invoke(app, ["promote", "chief@example.com", "police"])
        assert result.exit_code == 0
        assert "police" in result.output

    def test_promote_unknown_identity(self, file_db):
        result = runner.invoke(app, ["promote", "ghost@example.com", "admin"])
        assert result.exit_code == 1
        assert "NOT_FOUND" in result.output

    def test_promote_unknown_role(self, file_db):
        _register("r@example.com")
        result = runner.invoke(app, ["promote", "r@example.com", "root"])
        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output
