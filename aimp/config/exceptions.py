# =============================================================================
# AIMP v1.0.0 -- CONFIGURATION LAYER
# File:   aimp/config/exceptions.py
# =============================================================================
#
# SCOPE
# -----
# Exception hierarchy for configuration loading and validation.
#
# The evaluation hot path (aimp.core) never raises; out-of-range record data
# is normalised instead. Configuration is different: it is loaded once, off
# the hot path, and a bad manifest must fail loudly before any evaluation
# runs.
#
# EXCEPTION HIERARCHY
# -------------------
#   ConfigError(Exception)                   -- base; never raised directly
#     ConfigNumericalError(ConfigError)      -- NaN / Inf in a numeric field
#     ConfigValidationError(ConfigError)     -- range / sign / type violation
#     ConfigConsistencyError(ConfigError)    -- cross-field violation
#     ConfigLoadError(ConfigError)           -- missing file / malformed JSON
#
# MESSAGE CONTRACT
# ----------------
# Every message is deterministic, ASCII-safe, non-empty, and names the
# offending field and value.
# =============================================================================

from __future__ import annotations

from typing import Any


# =============================================================================
# BASE EXCEPTION
# =============================================================================

class ConfigError(Exception):
    """
    Base class for all configuration exceptions.

    Attributes:
        field_name:  Dotted path of the offending field (e.g.
                     "freshness.warning_sec"), or "" when not applicable.
        value:       The offending value, or None.
        message:     Human-readable description. Always non-empty.
    """

    def __init__(
        self,
        message:    str,
        field_name: str = "",
        value:      Any = None,
    ) -> None:
        if not isinstance(message, str) or not message:
            raise ValueError("ConfigError: message must be a non-empty string")
        if not isinstance(field_name, str):
            raise ValueError("ConfigError: field_name must be a string")
        super().__init__(message)
        self.field_name: str = field_name
        self.value:      Any = value
        self.message:    str = message

    def __repr__(self) -> str:
        return (
            self.__class__.__name__
            + "(field_name=" + repr(self.field_name)
            + ", value=" + repr(self.value)
            + ", message=" + repr(self.message)
            + ")"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.field_name == other.field_name
            and self.value == other.value
            and self.message == other.message
        )

    __hash__ = Exception.__hash__


# =============================================================================
# CONCRETE EXCEPTIONS
# =============================================================================

class ConfigNumericalError(ConfigError):
    """
    Raised when a numeric configuration field is NaN or Inf.

    Message format:
        "ConfigNumericalError: field '<field_name>' contains non-finite
         value: <value>. NaN and Inf are not permitted."
    """

    def __init__(self, field_name: str, value: float) -> None:
        if not field_name:
            raise ValueError("ConfigNumericalError: field_name must be a non-empty string")
        message = (
            "ConfigNumericalError: field '"
            + field_name
            + "' contains non-finite value: "
            + repr(value)
            + ". NaN and Inf are not permitted."
        )
        super().__init__(message=message, field_name=field_name, value=value)


class ConfigValidationError(ConfigError):
    """
    Raised when a field violates a range, sign, type or membership constraint.

    Message format:
        "ConfigValidationError: field '<field_name>' violates constraint
         '<constraint>': got <value>."
    """

    def __init__(self, field_name: str, value: Any, constraint: str) -> None:
        if not field_name:
            raise ValueError("ConfigValidationError: field_name must be a non-empty string")
        if not isinstance(constraint, str) or not constraint:
            raise ValueError("ConfigValidationError: constraint must be a non-empty string")
        message = (
            "ConfigValidationError: field '"
            + field_name
            + "' violates constraint '"
            + constraint
            + "': got "
            + repr(value)
            + "."
        )
        super().__init__(message=message, field_name=field_name, value=value)
        self.constraint: str = constraint


class ConfigConsistencyError(ConfigError):
    """
    Raised when individually valid fields together break a relational
    invariant, e.g. freshness thresholds that are not strictly ascending.

    The base field_name / value carry the first field; field_b / value_b
    carry the second.
    """

    def __init__(
        self,
        field_a:               str,
        value_a:               Any,
        field_b:               str,
        value_b:               Any,
        invariant_description: str,
    ) -> None:
        if not field_a or not field_b:
            raise ValueError("ConfigConsistencyError: field names must be non-empty")
        if not isinstance(invariant_description, str) or not invariant_description:
            raise ValueError(
                "ConfigConsistencyError: invariant_description must be non-empty"
            )
        message = (
            "ConfigConsistencyError: cross-field invariant violated -- "
            + invariant_description
            + ". Field '"
            + field_a
            + "' = "
            + repr(value_a)
            + ", field '"
            + field_b
            + "' = "
            + repr(value_b)
            + "."
        )
        super().__init__(message=message, field_name=field_a, value=value_a)
        self.field_a:               str = field_a
        self.value_a:               Any = value_a
        self.field_b:               str = field_b
        self.value_b:               Any = value_b
        self.invariant_description: str = invariant_description


class ConfigLoadError(ConfigError):
    """
    Raised when a manifest file cannot be read or parsed, or lacks a
    required section.

    Message format:
        "ConfigLoadError: <source>: <reason>"
    """

    def __init__(self, source: str, reason: str) -> None:
        if not reason:
            raise ValueError("ConfigLoadError: reason must be non-empty")
        message = "ConfigLoadError: " + str(source) + ": " + reason
        super().__init__(message=message, field_name="", value=source)
        self.source: str = str(source)
        self.reason: str = reason


__all__ = [
    "ConfigError",
    "ConfigNumericalError",
    "ConfigValidationError",
    "ConfigConsistencyError",
    "ConfigLoadError",
]
