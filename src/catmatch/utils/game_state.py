from __future__ import annotations

from esper import World

from catmatch.components.game_state import GamePhase, GameState
from catmatch.events.bus import EVENT_GAME_MODE_CHANGED, EventBus


def get_game_state(world: World) -> GameState:
    for _, state in world.get_component(GameState):
        return state
    state = GameState()
    world.create_entity(state)
    return state


def set_game_phase(world: World, event_bus: EventBus, phase: GamePhase) -> None:
    """Update the session phase and emit a change event when it differs."""
    state = get_game_state(world)
    previous = state.phase
    if previous == phase:
        return
    state.phase = phase
    event_bus.emit(EVENT_GAME_MODE_CHANGED, previous_mode=previous, new_mode=phase)
