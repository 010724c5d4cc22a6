"""SafeTour configuration via pydantic-settings."""

import json
import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "audit_hmac_key": "insecure-audit-key-change-me",
}


class SafeTourSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SAFETOUR_")

    environment: str = "development"

    # Session tokens. The secret has no default: startup fails without it.
    token_secret: str = ""
    token_ttl: int = 5 * 3600  # seconds

    # Audit chain signing key, or a JSON keyring '{"0": "old", "1": "new"}'
    audit_hmac_key: str = "insecure-audit-key-change-me"
    audit_hmac_keys: str = ""

    # Passwords: werkzeug pbkdf2:sha256 iteration count
    password_hash_iterations: int = 600_000

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/safetour.db"

    # API
    api_title: str = "SafeTour"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 3000
    api_prefix: str = ""
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8081"]
    log_level: str = "INFO"

    # Chain client
    chain_rpc_url: str = ""
    chain_contract_address: str = ""
    chain_private_key: str = ""
    chain_abi_path: str = ""
    chain_timeout: float = 60.0  # seconds

    @property
    def audit_keyring(self) -> dict[int, str]:
        """Return the audit HMAC keyring as {version_int: key_str}.

        If audit_hmac_keys is set, parse it as JSON.
        Otherwise, fall back to scalar audit_hmac_key as version 0.
        """
        if self.audit_hmac_keys:
            try:
                raw = json.loads(self.audit_hmac_keys)
            except (json.JSONDecodeError, TypeError) as exc:
                raise ValueError(
                    f"SAFETOUR_AUDIT_HMAC_KEYS must be valid JSON (e.g. '{{\"0\": \"key\"}}'), got: {self.audit_hmac_keys!r}"
                ) from exc
            return {int(k): v for k, v in raw.items()}
        return {0: self.audit_hmac_key}

    @property
    def current_audit_key(self) -> str:
        """Return the audit key for the current (highest) version."""
        ring = self.audit_keyring
        return ring[max(ring.keys())]

    def validate_for_production(self) -> None:
        """Raise on a missing token secret, or insecure defaults outside development."""
        if not self.token_secret.strip():
            raise RuntimeError(
                "Missing required setting SAFETOUR_TOKEN_SECRET. "
                "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default and not self.audit_hmac_keys
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"SAFETOUR_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}."
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default audit key, set SAFETOUR_AUDIT_HMAC_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> SafeTourSettings:
    settings = SafeTourSettings()
    settings.validate_for_production()
    return settings
