from __future__ import annotations

import pytest

from ext_authz_server.authz.config import AccountPlanPolicyConfig
from ext_authz_server.services.decision_service import DecisionService


@pytest.fixture
def account_service() -> DecisionService:
    # Sample registry: Scott/Yuval -> 1, Jonathan/Yuliia -> 2, Bill -> 3.
    return DecisionService.from_config(AccountPlanPolicyConfig())
