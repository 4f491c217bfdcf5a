from .events import Event, EventType, EventQueue
from .runtime import Runtime, RuntimeConfig, StepResult

__all__ = [
    "Event",
    "EventType",
    "EventQueue",
    "Runtime",
    "RuntimeConfig",
    "StepResult",
]
