from esper import World

from catmatch.components.game_state import GamePhase, GameState
from catmatch.components.move_counter import MoveCounter
from catmatch.components.turn_state import TurnState


def get_or_create_turn_state(world: World) -> TurnState:
    """Return the shared TurnState component, creating it if absent."""
    existing = list(world.get_component(TurnState))
    if existing:
        return existing[0][1]
    world.create_entity(TurnState())
    return list(world.get_component(TurnState))[0][1]


def can_accept_input(world: World) -> bool:
    """True while a level is being played, nothing is in flight and moves remain."""
    for _, state in world.get_component(GameState):
        if state.phase is not GamePhase.PLAYING:
            return False
    if get_or_create_turn_state(world).busy:
        return False
    for _, moves in world.get_component(MoveCounter):
        if moves.remaining <= 0:
            return False
    return True
