"""Tests for role-based access decisions."""

import pytest

from safetour.auth.guard import ALERT_RESPONDERS, ISSUERS, Role, authorize
from safetour.auth.tokens import Claims


def _claims(role: Role) -> Claims:
    return Claims(identity_id="id-1", role=role, issued_at=0.0, expires_at=1.0)


class TestAuthorize:
    @pytest.mark.parametrize("role", [Role.ADMIN, Role.POLICE])
    def test_responders_may_handle_alerts(self, role):
        assert authorize(_claims(role), ALERT_RESPONDERS).authorized is True

    def test_tourist_may_not_handle_alerts(self):
        decision = authorize(_claims(Role.TOURIST), ALERT_RESPONDERS)
        assert decision.authorized is False
        assert "tourist" in decision.reason

    def test_only_admin_issues(self):
        assert authorize(_claims(Role.ADMIN), ISSUERS).authorized is True
        assert authorize(_claims(Role.POLICE), ISSUERS).authorized is False
        assert authorize(_claims(Role.TOURIST), ISSUERS).authorized is False

    def test_missing_claims_denied(self):
        assert authorize(None, ISSUERS).authorized is False

    def test_string_roles_accepted(self):
        assert authorize(_claims(Role.POLICE), ["police"]).authorized is True

    def test_empty_role_set_denies_everyone(self):
        assert authorize(_claims(Role.ADMIN), []).authorized is False
