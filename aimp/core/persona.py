# =============================================================================
# AIMP v1.0.0 -- TRUST MOTION CORE
# File:   aimp/core/persona.py
# =============================================================================
#
# SCOPE
# -----
# AgentPersonaCalibrator. Static per-persona motion identity.
#
#   operations  -> speed 1.0, organic
#   markets     -> speed 1.2, bounceSoft
#   sentinel    -> speed 0.9, glass
#   governor    -> speed 1.1, easeOutBack
#   unknown     -> speed 1.0, organic
#
#   effective_duration = base / speed * freshness_modifier
#
# Lookup only; no state, no I/O.
# =============================================================================

from __future__ import annotations

from typing import Any, Optional

from aimp.config.settings import (
    DEFAULT_ENGINE_CONFIG,
    EasingCurve,
    EngineConfig,
    PersonaProfile,
)
from aimp.core.domain import AgentPersona
from aimp.utils.constants import FALLBACK_PERSONA_EASING, FALLBACK_PERSONA_SPEED

FALLBACK_PERSONA_PROFILE: PersonaProfile = PersonaProfile(
    speed_multiplier=FALLBACK_PERSONA_SPEED,
    easing_id=FALLBACK_PERSONA_EASING,
)


def _as_persona(persona: Any) -> Optional[AgentPersona]:
    if persona is None or isinstance(persona, AgentPersona):
        return persona
    try:
        return AgentPersona(str(persona).strip().lower())
    except ValueError:
        return None


def calibrate_persona(
    persona: Any,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> PersonaProfile:
    """PersonaProfile for a persona member or name. Unknown -> fallback."""
    member = _as_persona(persona)
    if member is None:
        return FALLBACK_PERSONA_PROFILE
    return config.personas.get(member, FALLBACK_PERSONA_PROFILE)


def easing_curve(
    easing_id: str,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> EasingCurve:
    """Control points for an easing id. Unknown ids resolve to the fallback curve."""
    curve = config.easings.get(easing_id)
    if curve is None:
        return config.easings[FALLBACK_PERSONA_EASING]
    return curve


def effective_duration(
    base_duration: float,
    persona: Any,
    freshness_modifier: float = 1.0,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    profile = calibrate_persona(persona, config)
    return base_duration / profile.speed_multiplier * freshness_modifier


__all__ = [
    "FALLBACK_PERSONA_PROFILE",
    "calibrate_persona",
    "easing_curve",
    "effective_duration",
]
