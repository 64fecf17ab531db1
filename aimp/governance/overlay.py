# aimp/governance/overlay.py
# Version: 1.0.0
# Domain-specific composition layer (layer 5): governance enforcement state.

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from aimp.core.domain import AgentPersona, GovernanceState, OperationalStatus, PulseSpeed


@dataclass(frozen=True)
class GovernanceOverride:
    pulse_speed:  Optional[PulseSpeed]   # None -> pass through
    neutral_tone: bool


_NO_OVERRIDE = GovernanceOverride(pulse_speed=None, neutral_tone=False)

GOVERNANCE_OVERRIDES: Mapping[GovernanceState, GovernanceOverride] = MappingProxyType({
    GovernanceState.ENFORCING: GovernanceOverride(pulse_speed=None, neutral_tone=True),
    GovernanceState.VOTING:    GovernanceOverride(pulse_speed=PulseSpeed.MEDIUM, neutral_tone=False),
    GovernanceState.COMPLIANT: _NO_OVERRIDE,
    GovernanceState.VIOLATED:  GovernanceOverride(pulse_speed=PulseSpeed.FAST, neutral_tone=False),
})

_missing = [s.value for s in GovernanceState if s not in GOVERNANCE_OVERRIDES]
if _missing:
    raise RuntimeError("GOVERNANCE_OVERRIDES is missing entries for " + repr(_missing))


def governance_state_for(
    persona: Optional[AgentPersona],
    status: OperationalStatus,
    explicit: Optional[GovernanceState] = None,
    has_constraint_violation: Optional[bool] = None,
) -> Optional[GovernanceState]:
    """
    Resolve the governance state of one record.

    Precedence: explicit state, then a known constraint-violation flag
    (violated / enforcing), then the governor persona rule (fault ->
    violated, else compliant). Other personas without either signal get
    None (layer inactive).
    """
    if explicit is not None:
        return explicit
    if has_constraint_violation is not None:
        return GovernanceState.VIOLATED if has_constraint_violation else GovernanceState.ENFORCING
    if persona is AgentPersona.GOVERNOR:
        return GovernanceState.VIOLATED if status is OperationalStatus.FAULT else GovernanceState.COMPLIANT
    return None


def governance_overrides(state: Optional[GovernanceState]) -> GovernanceOverride:
    if state is None:
        return _NO_OVERRIDE
    return GOVERNANCE_OVERRIDES[state]


__all__ = [
    "GovernanceOverride",
    "GOVERNANCE_OVERRIDES",
    "governance_state_for",
    "governance_overrides",
]
