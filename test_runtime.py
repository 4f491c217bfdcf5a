"""Tests for the runtime loop and its events."""

import pytest

from tilechase.runtime import Event, EventQueue, EventType, Runtime, RuntimeConfig
from tilechase.world import World


OPEN_ROOM = [
    "C.......",
    "........",
    "........",
    ".......P",
]


def event_types(result):
    return [e.event_type for e in result.events]


def test_first_step_reports_path():
    runtime = Runtime(World.from_ascii(OPEN_ROOM))
    result = runtime.step()

    assert result.tick == 1
    assert EventType.PATH_FOUND in event_types(result)
    found = [e for e in result.events if e.event_type == EventType.PATH_FOUND][0]
    assert found.data["chaser_id"] == "chaser_0"
    assert found.data["waypoints"] > 0


def test_sealed_player_reports_no_path():
    world = World.from_ascii([
        "C....",
        "...##",
        "...#P",
    ])
    result = Runtime(world).step()
    assert EventType.PATH_NOT_FOUND in event_types(result)


def test_player_move_event():
    runtime = Runtime(World.from_ascii(OPEN_ROOM), RuntimeConfig(ticks_per_second=10))
    start = runtime.world.player.position.copy()

    runtime.move_player(-1.0, 0.0)
    assert runtime.event_queue.pending_count == 1
    runtime.step()

    assert runtime.event_queue.pending_count == 0
    assert runtime.event_queue.history_count == 1
    assert runtime.world.player.position.x == pytest.approx(start.x - 12.8)
    assert runtime.world.player.position.y == start.y

    # Input is per tick: no new event, no movement
    moved_to = runtime.world.player.position.copy()
    runtime.step()
    assert runtime.world.player.position == moved_to


def test_set_tile_event_triggers_replan():
    runtime = Runtime(World.from_ascii(OPEN_ROOM))
    runtime.step()
    quiet = runtime.step()
    assert EventType.PATH_FOUND not in event_types(quiet)

    revision = runtime.world.obstacle_map.revision
    runtime.set_tile(4, 2, blocked=True)
    result = runtime.step()

    assert runtime.world.obstacle_map.revision == revision + 1
    assert runtime.world.obstacle_map.is_blocked(4, 2)
    assert EventType.PATH_FOUND in event_types(result)


def test_chaser_arrival_event_fires_once():
    runtime = Runtime(World.from_ascii(["C.P"]), RuntimeConfig(ticks_per_second=20))

    arrivals = 0
    for _ in range(200):
        result = runtime.step()
        arrivals += event_types(result).count(EventType.CHASER_ARRIVED)

    assert arrivals == 1, f"Expected exactly one arrival, got {arrivals}"
    chaser = runtime.world.chasers[0]
    assert runtime.world.cell_of(chaser) == runtime.world.player_cell


def test_step_history():
    runtime = Runtime(World.from_ascii(OPEN_ROOM), RuntimeConfig(max_history=3))
    runtime.run(5)

    history = runtime.get_step_history()
    assert [h["tick"] for h in history] == [3, 4, 5]
    assert runtime.get_step_history(last_n=1)[0]["tick"] == 5
    assert set(history[0]) == {"tick", "world_state", "events"}


def test_history_disabled():
    runtime = Runtime(World.from_ascii(OPEN_ROOM), RuntimeConfig(enable_logging=False))
    runtime.run(3)
    assert runtime.get_step_history() == []
    assert runtime.tick == 3


def test_out_of_map_edit_rejected_when_queued():
    runtime = Runtime(World.from_ascii(OPEN_ROOM), RuntimeConfig(ticks_per_second=10))
    start_x = runtime.world.player.position.x

    with pytest.raises(ValueError):
        runtime.set_tile(99, 99)
    assert runtime.event_queue.pending_count == 0

    # Input queued after the rejected edit still applies
    runtime.move_player(-1.0, 0.0)
    runtime.step()
    assert runtime.world.player.position.x == pytest.approx(start_x - 12.8)


def test_zero_max_history_keeps_nothing():
    runtime = Runtime(World.from_ascii(OPEN_ROOM), RuntimeConfig(max_history=0))
    runtime.run(5)
    assert runtime.get_step_history() == []
    assert runtime.tick == 5


def test_invalid_tick_rate():
    with pytest.raises(ValueError):
        Runtime(World.from_ascii(OPEN_ROOM), RuntimeConfig(ticks_per_second=0))
    with pytest.raises(ValueError):
        Runtime(World.from_ascii(OPEN_ROOM), RuntimeConfig(max_history=-1))


def test_event_queue():
    queue = EventQueue(max_size=2)
    queue.push_player_move(1.0, 0.0, tick=0)
    queue.push_set_tile(1, 1, True, tick=0)
    queue.push(Event(EventType.PLAYER_MOVE, tick=1, data={"axis_x": 0.0, "axis_y": 1.0}))

    assert queue.pending_count == 2, "Oldest event dropped past max_size"
    events = queue.pop_all()
    assert [e.event_type for e in events] == [EventType.SET_TILE, EventType.PLAYER_MOVE]
    assert events[0].to_dict() == {
        "event_type": "set_tile",
        "tick": 0,
        "data": {"gx": 1, "gy": 1, "blocked": True},
    }
    assert queue.pending_count == 0


def test_get_state():
    runtime = Runtime(World.from_ascii(OPEN_ROOM))
    runtime.move_player(1.0, 0.0)
    state = runtime.get_state()
    assert state["tick"] == 0
    assert state["pending_events"] == 1
    assert state["world"]["player_cell"] == (7, 3)


if __name__ == "__main__":
    test_first_step_reports_path()
    test_sealed_player_reports_no_path()
    test_player_move_event()
    test_set_tile_event_triggers_replan()
    test_chaser_arrival_event_fires_once()
    test_step_history()
    test_history_disabled()
    test_out_of_map_edit_rejected_when_queued()
    test_zero_max_history_keeps_nothing()
    test_invalid_tick_rate()
    test_event_queue()
    test_get_state()
    print("\n=== All runtime tests passed! ===")
