from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List
from collections import deque


class EventType(Enum):
    """Types of events that can occur during runtime."""
    # Input events
    PLAYER_MOVE = auto()      # Player input axis for the next tick
    SET_TILE = auto()         # Place or remove a map tile

    # Chaser events
    PATH_FOUND = auto()       # A chaser replanned and found a path
    PATH_NOT_FOUND = auto()   # A chaser replanned and found nothing
    CHASER_ARRIVED = auto()   # A chaser finished its path (reached the player's cell)


@dataclass
class Event:
    """
    Represents an event in the runtime system.
    Events come either from input or from state changes during a tick.
    """
    event_type: EventType
    tick: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.name.lower(),
            "tick": self.tick,
            "data": self.data,
        }


class EventQueue:
    """
    Queue for managing events between ticks.
    Inputs are queued and processed at the start of each tick.
    """

    def __init__(self, max_size: int = 100):
        self._queue: deque = deque(maxlen=max_size)
        self._processed: List[Event] = []

    def push(self, event: Event) -> None:
        """Add an event to the queue."""
        self._queue.append(event)

    def push_player_move(self, axis_x: float, axis_y: float, tick: int) -> None:
        """Convenience method to queue player input."""
        self.push(Event(
            event_type=EventType.PLAYER_MOVE,
            tick=tick,
            data={"axis_x": axis_x, "axis_y": axis_y},
        ))

    def push_set_tile(self, gx: int, gy: int, blocked: bool, tick: int) -> None:
        """Convenience method to queue a map edit."""
        self.push(Event(
            event_type=EventType.SET_TILE,
            tick=tick,
            data={"gx": gx, "gy": gy, "blocked": blocked},
        ))

    def pop_all(self) -> List[Event]:
        """Pop all pending events from the queue."""
        events = list(self._queue)
        self._queue.clear()
        return events

    def record_processed(self, event: Event) -> None:
        """Record an event that was processed (for logging)."""
        self._processed.append(event)

    def get_processed_history(self) -> List[Dict[str, Any]]:
        """Get all processed events as dicts."""
        return [e.to_dict() for e in self._processed]

    def clear_history(self) -> None:
        self._processed.clear()

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def history_count(self) -> int:
        return len(self._processed)
