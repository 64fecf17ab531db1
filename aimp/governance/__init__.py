# aimp/governance/__init__.py
# Version: 1.0.0

from aimp.governance.overlay import (
    GovernanceOverride,
    GOVERNANCE_OVERRIDES,
    governance_state_for,
    governance_overrides,
)

__all__ = [
    "GovernanceOverride",
    "GOVERNANCE_OVERRIDES",
    "governance_state_for",
    "governance_overrides",
]
