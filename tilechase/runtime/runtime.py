"""
Runtime orchestrator for the chase simulation.

Flow per tick:
1. Process queued input events (player movement, map edits)
2. Step the world: chasers replan when needed and move along their paths
3. Turn replans and arrivals into events
4. Return the step result
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tilechase.world import World
from .events import Event, EventQueue, EventType

logger = logging.getLogger(__name__)


@dataclass
class RuntimeConfig:
    """Configuration for the runtime loop."""
    ticks_per_second: int = 60
    enable_logging: bool = True  # Keep per-step history
    max_history: Optional[int] = None  # None keeps every step


@dataclass
class StepResult:
    """Result of a single runtime step."""
    tick: int
    world_state: Dict[str, Any]
    events: List[Event]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "world_state": self.world_state,
            "events": [e.to_dict() for e in self.events],
        }


class Runtime:
    """
    Main loop driving a World at a fixed tick rate.

    Usage:
        runtime = Runtime(World.from_ascii(rows))
        while running:
            runtime.move_player(axis_x, axis_y)
            result = runtime.step()
    """

    def __init__(self, world: World, config: Optional[RuntimeConfig] = None):
        self.config = config or RuntimeConfig()
        if self.config.ticks_per_second <= 0:
            raise ValueError(
                f"ticks_per_second must be positive, got {self.config.ticks_per_second}"
            )
        if self.config.max_history is not None and self.config.max_history < 0:
            raise ValueError(f"max_history must not be negative, got {self.config.max_history}")
        self._world = world
        self._event_queue = EventQueue()

        self._step_history: List[StepResult] = []
        self._tick_events: List[Event] = []
        self._pending_axis = (0.0, 0.0)
        self._arrived: Dict[str, bool] = {}

    @property
    def tick(self) -> int:
        return self._world.tick_count

    @property
    def dt(self) -> float:
        return 1.0 / self.config.ticks_per_second

    @property
    def world(self) -> World:
        return self._world

    @property
    def event_queue(self) -> EventQueue:
        return self._event_queue

    def move_player(self, axis_x: float, axis_y: float) -> None:
        """Queue player input for the next tick."""
        self._event_queue.push_player_move(axis_x, axis_y, self.tick)

    def set_tile(self, gx: int, gy: int, blocked: bool = True) -> None:
        """Queue a map edit for the next tick."""
        if not self._world.obstacle_map.in_bounds(gx, gy):
            raise ValueError(f"Tile ({gx}, {gy}) is outside the map")
        self._event_queue.push_set_tile(gx, gy, blocked, self.tick)

    def step(self) -> StepResult:
        """Advance the simulation by one tick."""
        self._tick_events = []
        self._pending_axis = (0.0, 0.0)

        self._process_events()

        axis_x, axis_y = self._pending_axis
        self._world.move_player(axis_x, axis_y, self.dt)
        world_state = self._world.step(self.dt)

        for replan in self._world.last_replans:
            event_type = EventType.PATH_FOUND if replan.found else EventType.PATH_NOT_FOUND
            self._emit_event(event_type, {
                "chaser_id": replan.chaser_id,
                "waypoints": replan.waypoint_count,
            })

        self._check_arrivals()

        result = StepResult(
            tick=self.tick,
            world_state=world_state,
            events=list(self._tick_events),
        )

        if self.config.enable_logging:
            self._step_history.append(result)
            max_history = self.config.max_history
            if max_history is not None and len(self._step_history) > max_history:
                del self._step_history[:len(self._step_history) - max_history]

        return result

    def run(self, ticks: int) -> List[StepResult]:
        """Step repeatedly without input."""
        return [self.step() for _ in range(ticks)]

    def _check_arrivals(self) -> None:
        """Emit CHASER_ARRIVED once each time a chaser completes its path."""
        for chaser in self._world.chasers:
            complete = chaser.navigator.get_state().is_complete
            if complete and not self._arrived.get(chaser.entity_id, False):
                self._emit_event(EventType.CHASER_ARRIVED, {"chaser_id": chaser.entity_id})
            self._arrived[chaser.entity_id] = complete

    def _process_events(self) -> None:
        """Process all pending events at the start of the tick."""
        for event in self._event_queue.pop_all():
            self._handle_event(event)
            self._event_queue.record_processed(event)

    def _handle_event(self, event: Event) -> None:
        if event.event_type == EventType.PLAYER_MOVE:
            # Last input of the tick wins
            self._pending_axis = (
                event.data.get("axis_x", 0.0),
                event.data.get("axis_y", 0.0),
            )
        elif event.event_type == EventType.SET_TILE:
            data = event.data
            self._world.set_tile(data["gx"], data["gy"], data.get("blocked", True))
            logger.debug("Tile (%d, %d) set to %s", data["gx"], data["gy"], data.get("blocked", True))

    def _emit_event(self, event_type: EventType, data: Dict[str, Any]) -> None:
        """Emit an event for this tick."""
        self._tick_events.append(Event(event_type=event_type, tick=self.tick, data=data))

    def get_state(self) -> Dict[str, Any]:
        """Get complete runtime state (for debugging)."""
        return {
            "tick": self.tick,
            "world": self._world.get_state(),
            "pending_events": self._event_queue.pending_count,
        }

    def get_step_history(self, last_n: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get step history for analysis."""
        history = self._step_history[-last_n:] if last_n else self._step_history
        return [r.to_dict() for r in history]
