import random

import pytest

from catmatch.constants import DEFAULT_TILE_KINDS
from catmatch.events.bus import EventBus
from catmatch.components.board import Board
from catmatch.components.game_state import GamePhase, GameState
from catmatch.components.level import LevelCatalog
from catmatch.systems.board_ops import find_all_matches, generate_initial_grid
from catmatch.world import create_world


@pytest.mark.parametrize("seed", range(20))
def test_initial_board_has_no_matches(seed):
    grid = generate_initial_grid(8, list(DEFAULT_TILE_KINDS), random.Random(seed))
    assert find_all_matches(grid) == []
    assert grid.is_full()
    grid.check_invariants()
    assert not any(tile.is_power_up for tile in grid.tiles())


def test_initial_board_with_five_kinds():
    kinds = ["a", "b", "c", "d", "e"]
    grid = generate_initial_grid(8, kinds, random.Random(42))
    assert find_all_matches(grid) == []
    assert {tile.kind for tile in grid.tiles()} <= set(kinds)


def test_initial_board_needs_two_kinds():
    with pytest.raises(ValueError):
        generate_initial_grid(4, ["a"], random.Random(0))


def test_create_world_sets_up_session_resources():
    world = create_world(EventBus(), rng=random.Random(5))
    states = list(world.get_component(GameState))
    assert len(states) == 1 and states[0][1].phase is GamePhase.MENU
    catalog = list(world.get_component(LevelCatalog))[0][1]
    assert len(catalog.levels) == 50
    grid = list(world.get_component(Board))[0][1].grid
    assert grid.size == 8
    assert find_all_matches(grid) == []
