"""Role-based access control."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from safetour.auth.tokens import Claims


class Role(str, Enum):
    TOURIST = "tourist"
    ADMIN = "admin"
    POLICE = "police"


# Capability sets
ALERT_RESPONDERS = frozenset({Role.ADMIN, Role.POLICE})
ISSUERS = frozenset({Role.ADMIN})


@dataclass(frozen=True)
class AccessDecision:
    authorized: bool
    reason: str = ""


def authorize(claims: "Claims | None", required_roles: Iterable[Role]) -> AccessDecision:
    """Authorized iff the verified role is one of ``required_roles``."""
    required = frozenset(Role(r) for r in required_roles)
    if claims is None:
        return AccessDecision(False, "No verified identity")
    if claims.role in required:
        return AccessDecision(True)
    allowed = ", ".join(sorted(r.value for r in required))
    return AccessDecision(
        False, f"Role '{claims.role.value}' is not permitted; requires one of: {allowed}"
    )
