# aimp/config/loader.py
# Loads the trust motion manifest (TRUST_MANIFEST.json) into an EngineConfig.
#
# Manifest layout (every section optional; an absent section keeps the
# built-in defaults from aimp.utils.constants):
#
#   {
#     "manifest_version": "1.0.0",
#     "freshness":    {"critical_sec": 10, "warning_sec": 60, "stale_sec": 300,
#                      "duration_modifiers": [1.0, 1.1, 1.2, 1.3]},
#     "decay":        {"rate_per_minute": 0.8, "floor": 0.5},
#     "grades":       {"excellent_min": 90, "good_min": 70, "fair_min": 50, "poor_min": 30},
#     "status_rules": {"fault_below": 50, "nominal_min": 70, "optimal_min": 90},
#     "statuses":     {"<status>": {"speed_multiplier": .., "opacity_modifier": .., "should_pulse": ..}},
#     "personas":     {"<persona>": {"speed_multiplier": .., "easing_id": ".."}},
#     "easings":      {"<easing_id>": [x1, y1, x2, y2]},
#     "timings":      {"base_duration_sec": .., "reduced_motion_sec": .., "emergency_opacity": ..,
#                      "alert_repetitions": .., "reevaluation_interval_sec": ..}
#   }
#
# Unknown keys are rejected so that a typo never silently falls back to a
# default. The content hash is SHA-256 over the canonical JSON form (sorted
# keys, compact separators) and is stable across key order and whitespace.

import hashlib
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from aimp.core.domain import AgentPersona, OperationalStatus
from .exceptions import ConfigLoadError, ConfigValidationError
from .settings import (
    DEFAULT_ENGINE_CONFIG,
    DecayParameters,
    EasingCurve,
    EngineConfig,
    FreshnessThresholds,
    GradeCutoffs,
    MotionTimings,
    PersonaProfile,
    StatusProfile,
    StatusRules,
)

#: Manifest shipped with the package. Value-identical to aimp.utils.constants.
DEFAULT_MANIFEST_PATH: Path = Path(__file__).parent / "TRUST_MANIFEST.json"

_TOP_LEVEL_KEYS = frozenset({
    "manifest_version", "freshness", "decay", "grades", "status_rules",
    "statuses", "personas", "easings", "timings",
})


@dataclass(frozen=True)
class LoadedConfig:
    """EngineConfig plus the provenance of the manifest it came from."""
    config:       EngineConfig
    content_hash: str
    source:       str


def _section(data: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ConfigValidationError(
            field_name=name, value=value, constraint="must be a JSON object",
        )
    return dict(value)


def _build(cls, section_name: str, payload: Mapping[str, Any], defaults=None):
    """
    Instantiate a settings dataclass from a manifest section.

    Missing keys take the value from `defaults` (an instance of cls) when
    given, else the dataclass default. Unknown keys raise.
    """
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(payload) - allowed)
    if unknown:
        raise ConfigValidationError(
            field_name=section_name,
            value=unknown,
            constraint="unknown keys; allowed: " + repr(sorted(allowed)),
        )
    kwargs = dict(payload)
    if defaults is not None:
        for name in allowed:
            kwargs.setdefault(name, getattr(defaults, name))
    if "duration_modifiers" in kwargs and isinstance(kwargs["duration_modifiers"], list):
        kwargs["duration_modifiers"] = tuple(kwargs["duration_modifiers"])
    return cls(**kwargs)


def _enum_table(section_name: str, payload: Mapping[str, Any], enum_cls,
                profile_cls, base: Mapping) -> Dict:
    table = dict(base)
    for key, entry in payload.items():
        try:
            member = enum_cls(key)
        except ValueError:
            raise ConfigValidationError(
                field_name=section_name,
                value=key,
                constraint="must be one of " + repr(sorted(m.value for m in enum_cls)),
            ) from None
        if not isinstance(entry, Mapping):
            raise ConfigValidationError(
                field_name=section_name + "." + key,
                value=entry,
                constraint="must be a JSON object",
            )
        table[member] = _build(profile_cls, section_name + "." + key, entry,
                               defaults=base.get(member))
    return table


def engine_config_from_dict(data: Mapping[str, Any],
                            base: EngineConfig = DEFAULT_ENGINE_CONFIG) -> EngineConfig:
    """
    Build and validate an EngineConfig from a parsed manifest.

    Sections present in `data` override the corresponding parts of `base`.

    Raises:
        ConfigValidationError, ConfigNumericalError, ConfigConsistencyError
    """
    if not isinstance(data, Mapping):
        raise ConfigValidationError(
            field_name="manifest", value=type(data).__name__,
            constraint="must be a JSON object",
        )
    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigValidationError(
            field_name="manifest",
            value=unknown,
            constraint="unknown sections; allowed: " + repr(sorted(_TOP_LEVEL_KEYS)),
        )

    easings = dict(base.easings)
    for easing_id, points in _section(data, "easings").items():
        if not isinstance(points, (list, tuple)):
            raise ConfigValidationError(
                field_name="easings." + easing_id,
                value=points,
                constraint="must be a list of 4 numbers",
            )
        easings[easing_id] = EasingCurve(easing_id, tuple(points))

    return EngineConfig(
        freshness=_build(FreshnessThresholds, "freshness",
                         _section(data, "freshness"), base.freshness),
        decay=_build(DecayParameters, "decay", _section(data, "decay"), base.decay),
        grades=_build(GradeCutoffs, "grades", _section(data, "grades"), base.grades),
        status_rules=_build(StatusRules, "status_rules",
                            _section(data, "status_rules"), base.status_rules),
        statuses=_enum_table("statuses", _section(data, "statuses"),
                             OperationalStatus, StatusProfile, base.statuses),
        personas=_enum_table("personas", _section(data, "personas"),
                             AgentPersona, PersonaProfile, base.personas),
        easings=easings,
        timings=_build(MotionTimings, "timings", _section(data, "timings"), base.timings),
    )


def manifest_hash(data: Mapping[str, Any]) -> str:
    """SHA-256 hex digest of the canonical JSON form of a parsed manifest."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_engine_config(path: Union[str, Path, None] = None) -> LoadedConfig:
    """
    Read, parse and validate a manifest file.

    Args:
        path: Manifest location. None -> the shipped TRUST_MANIFEST.json.

    Returns:
        LoadedConfig(config, content_hash, source).

    Raises:
        ConfigLoadError on a missing file or malformed JSON; any ConfigError
        subclass on invalid content.
    """
    manifest_path = Path(path) if path is not None else DEFAULT_MANIFEST_PATH
    if not manifest_path.exists():
        raise ConfigLoadError(str(manifest_path), "manifest file not found")
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigLoadError(str(manifest_path), "cannot read or parse manifest: " + str(exc)) from exc

    return LoadedConfig(
        config=engine_config_from_dict(data),
        content_hash=manifest_hash(data),
        source=str(manifest_path),
    )


__all__ = [
    "DEFAULT_MANIFEST_PATH",
    "LoadedConfig",
    "engine_config_from_dict",
    "manifest_hash",
    "load_engine_config",
]
