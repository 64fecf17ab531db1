# =============================================================================
# AIMP v1.0.0 -- TRUST MOTION CORE
# File:   aimp/core/composition.py
# =============================================================================
#
# SCOPE
# -----
# CompositionPipeline. Combines every state concern that applies to one
# record into a single DerivedPresentationParams.
#
# LAYER ORDER (fixed; a later layer's assignments always win)
# -----------
#   1. base         opacity 1.0, duration multiplier 1.0, pulse NONE, no alert
#   2. trust        opacity, duration_multiplier, should_alert
#                   (only when the record carries TrustMathematics)
#   3. decay        opacity *= max(decay factor, floor); displayed_confidence
#   4. operational  opacity *= status opacity modifier; pulse from the status
#                   table; FAULT forces should_alert
#   5. governance   pulse_speed override; neutral_tone
#   6. emergency    EMERGENCY: opacity = 0.7, desaturate. PAUSED: motion_paused
#   7. persona      duration_seconds and easing_id; never opacity or alerts
#
# Each layer is a pure function (LayerState, EvaluationInputs) -> LayerState.
# Fields a layer does not assign pass through unchanged. LAYER_ORDER holds
# the (name, function) pairs in application order.
#
# INVARIANTS
# ----------
# INV-CP-01: 0.5 <= opacity <= 1.0 after every layer.
# INV-CP-02: duration_multiplier >= 1.0.
# INV-CP-03: Under EMERGENCY, output opacity == timings.emergency_opacity.
# INV-CP-04: Identical inputs -> byte-identical to_canonical_json().
# INV-CP-05: evaluate() never raises on record data.
#
# DETERMINISM CONSTRAINTS
# -----------------------
# DET-01  The evaluation instant `now` is a required argument.
# DET-02  No caching, no module-level mutable state.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from aimp.config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig
from aimp.core.domain import (
    DerivedPresentationParams,
    GovernanceState,
    GradePolicy,
    MotionPreference,
    OperationalStatus,
    PulseSpeed,
    SourceRecord,
    SystemState,
    TrustGrade,
)
from aimp.core.freshness import FreshnessResult, age_seconds, clamp_age, classify_freshness
from aimp.core.operational_status import (
    health_category_for,
    pulse_speed_for_health,
    status_for_record,
)
from aimp.core.persona import calibrate_persona, effective_duration
from aimp.core.temporal_decay import decay_confidence, effective_decay
from aimp.core.trust_score import (
    clamp_opacity,
    grade_for_score,
    trust_duration_modifier,
    trust_opacity,
)
from aimp.governance.overlay import governance_overrides, governance_state_for


# =============================================================================
# SECTION 1 -- LAYER STATE AND INPUTS
# =============================================================================

@dataclass(frozen=True)
class LayerState:
    """Working parameter set threaded through the layers."""
    opacity:              float
    duration_multiplier:  float
    duration_seconds:     float
    pulse_speed:          PulseSpeed
    should_alert:         bool
    displayed_confidence: Optional[float]
    desaturate:           bool
    neutral_tone:         bool
    motion_paused:        bool
    easing_id:            str


@dataclass(frozen=True)
class EvaluationInputs:
    """Everything a layer may read. Resolved once per evaluation."""
    record:           SourceRecord
    age_seconds:      float
    freshness:        FreshnessResult
    status:           OperationalStatus
    governance_state: Optional[GovernanceState]
    motion:           MotionPreference
    system_state:     SystemState
    config:           EngineConfig


Layer = Callable[[LayerState, EvaluationInputs], LayerState]


# =============================================================================
# SECTION 2 -- LAYERS
# =============================================================================

def base_layer(state: Optional[LayerState], inputs: EvaluationInputs) -> LayerState:
    """Layer 1. Ignores any incoming state and starts from the defaults."""
    return LayerState(
        opacity=1.0,
        duration_multiplier=1.0,
        duration_seconds=inputs.config.timings.base_duration_sec,
        pulse_speed=PulseSpeed.NONE,
        should_alert=False,
        displayed_confidence=inputs.record.trust_score,
        desaturate=False,
        neutral_tone=False,
        motion_paused=False,
        easing_id=calibrate_persona(None, inputs.config).easing_id,
    )


def trust_layer(state: LayerState, inputs: EvaluationInputs) -> LayerState:
    """Layer 2."""
    tm = inputs.record.trust_math
    if tm is None:
        return state
    return replace(
        state,
        opacity=trust_opacity(tm),
        duration_multiplier=trust_duration_modifier(tm),
        should_alert=tm.exceeds_threshold,
    )


def decay_layer(state: LayerState, inputs: EvaluationInputs) -> LayerState:
    """Layer 3. Leaves duration_multiplier alone."""
    decay = inputs.config.decay
    displayed = state.displayed_confidence
    if displayed is not None:
        displayed = decay_confidence(displayed, inputs.age_seconds, decay)
    return replace(
        state,
        opacity=clamp_opacity(state.opacity * effective_decay(inputs.age_seconds, decay)),
        displayed_confidence=displayed,
    )


def operational_layer(state: LayerState, inputs: EvaluationInputs) -> LayerState:
    """Layer 4."""
    profile = inputs.config.statuses[inputs.status]
    if profile.should_pulse:
        pulse = pulse_speed_for_health(health_category_for(inputs.status))
    else:
        pulse = PulseSpeed.NONE
    return replace(
        state,
        opacity=clamp_opacity(state.opacity * profile.opacity_modifier),
        pulse_speed=pulse,
        should_alert=state.should_alert or inputs.status is OperationalStatus.FAULT,
    )


def governance_layer(state: LayerState, inputs: EvaluationInputs) -> LayerState:
    """Layer 5."""
    override = governance_overrides(inputs.governance_state)
    return replace(
        state,
        pulse_speed=override.pulse_speed if override.pulse_speed is not None else state.pulse_speed,
        neutral_tone=override.neutral_tone,
    )


def emergency_layer(state: LayerState, inputs: EvaluationInputs) -> LayerState:
    """Layer 6."""
    if inputs.system_state is SystemState.EMERGENCY:
        return replace(
            state,
            opacity=inputs.config.timings.emergency_opacity,
            desaturate=True,
        )
    if inputs.system_state is SystemState.PAUSED:
        return replace(state, motion_paused=True)
    return state


def persona_layer(state: LayerState, inputs: EvaluationInputs) -> LayerState:
    """
    Layer 7. Final duration in seconds and the easing identity.

    Reduced motion collapses the duration to the configured instant value;
    a paused system yields zero.
    """
    timings = inputs.config.timings
    profile = calibrate_persona(inputs.record.agent, inputs.config)
    if state.motion_paused:
        seconds = 0.0
    elif inputs.motion.reduce_motion:
        seconds = timings.reduced_motion_sec
    else:
        seconds = effective_duration(
            timings.base_duration_sec * state.duration_multiplier,
            inputs.record.agent,
            inputs.freshness.duration_modifier,
            inputs.config,
        )
    return replace(state, duration_seconds=seconds, easing_id=profile.easing_id)


LAYER_ORDER: Tuple[Tuple[str, Layer], ...] = (
    ("base",        base_layer),
    ("trust",       trust_layer),
    ("decay",       decay_layer),
    ("operational", operational_layer),
    ("governance",  governance_layer),
    ("emergency",   emergency_layer),
    ("persona",     persona_layer),
)


# =============================================================================
# SECTION 3 -- EVALUATION
# =============================================================================

def resolve_inputs(
    record: SourceRecord,
    age: float,
    motion: MotionPreference = MotionPreference(),
    system_state: SystemState = SystemState.NORMAL,
    governance_state: Optional[GovernanceState] = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> EvaluationInputs:
    age = clamp_age(age)
    status = status_for_record(record, config.status_rules)
    return EvaluationInputs(
        record=record,
        age_seconds=age,
        freshness=classify_freshness(age, config.freshness),
        status=status,
        governance_state=governance_state_for(
            record.agent, status, governance_state, record.has_constraint_violation,
        ),
        motion=motion,
        system_state=system_state,
        config=config,
    )


def run_layers(inputs: EvaluationInputs) -> List[Tuple[str, LayerState]]:
    """Apply LAYER_ORDER and return the state after each named layer."""
    trace: List[Tuple[str, LayerState]] = []
    state: Optional[LayerState] = None
    for name, layer in LAYER_ORDER:
        state = layer(state, inputs)
        trace.append((name, state))
    return trace


def _grade(record: SourceRecord, final: LayerState, policy: GradePolicy,
           config: EngineConfig) -> TrustGrade:
    if policy is GradePolicy.DECAYED:
        return grade_for_score(final.displayed_confidence, config.grades)
    # RAW keeps an upstream label; only an unlabelled score is derived.
    if record.trust_math is not None and record.trust_math.trust_grade is not None:
        return record.trust_math.trust_grade
    return grade_for_score(record.trust_score, config.grades)


def finalize(
    final: LayerState,
    inputs: EvaluationInputs,
    grade_policy: GradePolicy = GradePolicy.RAW,
) -> DerivedPresentationParams:
    return DerivedPresentationParams(
        opacity=final.opacity,
        duration_multiplier=final.duration_multiplier,
        duration_seconds=final.duration_seconds,
        pulse_speed=final.pulse_speed,
        should_alert=final.should_alert,
        alert_repetitions=inputs.config.timings.alert_repetitions if final.should_alert else 0,
        health_category=health_category_for(inputs.status),
        operational_status=inputs.status,
        trust_grade=_grade(inputs.record, final, grade_policy, inputs.config),
        freshness_tier=inputs.freshness.tier,
        age_seconds=inputs.age_seconds,
        displayed_confidence=final.displayed_confidence,
        desaturate=final.desaturate,
        neutral_tone=final.neutral_tone,
        motion_paused=final.motion_paused,
        easing_id=final.easing_id,
    )


def evaluate_at_age(
    record: SourceRecord,
    age: float,
    motion: MotionPreference = MotionPreference(),
    system_state: SystemState = SystemState.NORMAL,
    governance_state: Optional[GovernanceState] = None,
    grade_policy: GradePolicy = GradePolicy.RAW,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> DerivedPresentationParams:
    """evaluate() with the record age supplied directly, in seconds."""
    inputs = resolve_inputs(record, age, motion, system_state, governance_state, config)
    _, final = run_layers(inputs)[-1]
    return finalize(final, inputs, grade_policy)


def evaluate(
    record: SourceRecord,
    now: datetime,
    motion: MotionPreference = MotionPreference(),
    system_state: SystemState = SystemState.NORMAL,
    governance_state: Optional[GovernanceState] = None,
    grade_policy: GradePolicy = GradePolicy.RAW,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> DerivedPresentationParams:
    """
    Derive the presentation parameters of one record at instant `now`.

    Args:
        record:           Source record; never mutated.
        now:              Evaluation instant. Naive datetimes are UTC.
        motion:           Injected reduced-motion preference.
        system_state:     Global state for the emergency layer.
        governance_state: Explicit governance state; None lets the governor
                          persona rule decide.
        grade_policy:     RAW grades the undecayed score, DECAYED the
                          displayed confidence.
        config:           Validated engine configuration.

    Returns:
        DerivedPresentationParams. Never raises on record data.
    """
    return evaluate_at_age(
        record,
        age_seconds(record.timestamp, now),
        motion=motion,
        system_state=system_state,
        governance_state=governance_state,
        grade_policy=grade_policy,
        config=config,
    )


class CompositionPipeline:
    """
    Evaluation entry point bound to one configuration and grade policy.

    Stateless apart from its two settings; safe to share between callers.
    """

    def __init__(
        self,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        grade_policy: GradePolicy = GradePolicy.RAW,
    ) -> None:
        self._config = config
        self._grade_policy = grade_policy

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def grade_policy(self) -> GradePolicy:
        return self._grade_policy

    def evaluate(
        self,
        record: SourceRecord,
        now: datetime,
        motion: MotionPreference = MotionPreference(),
        system_state: SystemState = SystemState.NORMAL,
        governance_state: Optional[GovernanceState] = None,
    ) -> DerivedPresentationParams:
        return evaluate(
            record, now,
            motion=motion,
            system_state=system_state,
            governance_state=governance_state,
            grade_policy=self._grade_policy,
            config=self._config,
        )

    def trace(
        self,
        record: SourceRecord,
        now: datetime,
        motion: MotionPreference = MotionPreference(),
        system_state: SystemState = SystemState.NORMAL,
        governance_state: Optional[GovernanceState] = None,
    ) -> List[Tuple[str, LayerState]]:
        """Per-layer states for inspection; same inputs as evaluate()."""
        inputs = resolve_inputs(
            record, age_seconds(record.timestamp, now),
            motion, system_state, governance_state, self._config,
        )
        return run_layers(inputs)


__all__ = [
    "LayerState",
    "EvaluationInputs",
    "base_layer",
    "trust_layer",
    "decay_layer",
    "operational_layer",
    "governance_layer",
    "emergency_layer",
    "persona_layer",
    "LAYER_ORDER",
    "resolve_inputs",
    "run_layers",
    "finalize",
    "evaluate_at_age",
    "evaluate",
    "CompositionPipeline",
]
