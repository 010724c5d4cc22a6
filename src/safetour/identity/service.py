"""Credential store: register, look up and authenticate identities."""

import logging

from pydantic import validate_email
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from safetour.auth.guard import Role
from safetour.common.config import SafeTourSettings
from safetour.common.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from safetour.common.wallet import normalize_wallet_address
from safetour.identity.models import IdentityModel
from safetour.identity.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    try:
        _, email = validate_email((email or "").strip())
    except ValueError as exc:
        raise ValidationError(f"Malformed email address: {email!r}") from exc
    return email.lower()


class IdentityService:
    """Identity records with salted password hashes."""

    def __init__(self, settings: SafeTourSettings):
        self.settings = settings
        self._dummy_hash: str | None = None

    def _miss_hash(self) -> str:
        """Hash checked when the email is unknown, so misses cost the same."""
        if self._dummy_hash is None:
            self._dummy_hash = hash_password(
                "unknown-identity", iterations=self.settings.password_hash_iterations
            )
        return self._dummy_hash

    async def register(
        self,
        session: AsyncSession,
        email: str,
        password: str,
        wallet_address: str | None = None,
        name: str | None = None,
        emergency_contact: str | None = None,
    ) -> IdentityModel:
        """Create a tourist identity. Raises ConflictError on a taken email."""
        email = normalize_email(email)
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        if wallet_address:
            wallet_address = normalize_wallet_address(wallet_address)

        if await self.find_by_email(session, email) is not None:
            raise ConflictError("User with this email already exists")

        identity = IdentityModel(
            email=email,
            password_hash=hash_password(
                password, iterations=self.settings.password_hash_iterations
            ),
            wallet_address=wallet_address or None,
            role=Role.TOURIST.value,
            name=name,
            emergency_contact=emergency_contact,
        )
        session.add(identity)
        try:
            await session.flush()
        except IntegrityError as exc:
            # Lost a race against a concurrent registration
            raise ConflictError("User with this email already exists") from exc
        logger.info("Registered identity %s", identity.id)
        return identity

    async def find_by_email(
        self, session: AsyncSession, email: str
    ) -> IdentityModel | None:
        result = await session.execute(
            select(IdentityModel).where(IdentityModel.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def find_by_id(
        self, session: AsyncSession, identity_id: str
    ) -> IdentityModel | None:
        return await session.get(IdentityModel, identity_id)

    async def authenticate(
        self, session: AsyncSession, email: str, password: str
    ) -> IdentityModel:
        """Return the identity for matching credentials.

        Unknown email and wrong password fail with the same message.
        """
        identity = await self.find_by_email(session, email or "")
        stored = identity.password_hash if identity is not None else self._miss_hash()
        matched = verify_password(password or "", stored)
        if identity is None or not matched:
            logger.info("Failed login attempt")
            raise UnauthenticatedError("Invalid credentials")
        return identity

    async def set_role(
        self, session: AsyncSession, email: str, role: Role | str
    ) -> IdentityModel:
        """Change an identity's role. Only reachable from the operator CLI."""
        try:
            role = Role(role)
        except ValueError as exc:
            raise ValidationError(f"Unknown role: {role!r}") from exc
        identity = await self.find_by_email(session, email)
        if identity is None:
            raise NotFoundError(f"No identity with email {email!r}")
        identity.role = role.value
        await session.flush()
        logger.info("Identity %s role set to %s", identity.id, role.value)
        return identity
