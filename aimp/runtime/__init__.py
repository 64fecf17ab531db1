# aimp/runtime/__init__.py
# Version: 1.0.0

from aimp.runtime.motion import MotionPreferenceSource, Subscription
from aimp.runtime.context import ContextClosedError, EvaluationContext

__all__ = [
    "MotionPreferenceSource",
    "Subscription",
    "ContextClosedError",
    "EvaluationContext",
]
