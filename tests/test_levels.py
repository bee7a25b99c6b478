import random

import pytest

from catmatch.components.game_state import GamePhase
from catmatch.components.level import Level, LevelCatalog, Objective, ObjectiveKind
from catmatch.constants import DEFAULT_TILE_KINDS
from catmatch.errors import EngineInvariantError, LevelUnavailableError
from catmatch.events.bus import EVENT_GAME_MODE_CHANGED, EVENT_LEVEL_STARTED
from catmatch.factories.levels import generate_initial_levels
from catmatch.session import GameSession
from catmatch.systems.board_ops import find_all_matches
from tests.helpers import EventRecorder, base_rows, default_levels, grid_from_rows, start_session, with_cells

NEAR_MATCH = with_cells(base_rows(), {(3, 2): 'B', (3, 3): 'B', (2, 4): 'B'})


def test_default_progression():
    kinds = list(DEFAULT_TILE_KINDS)
    levels = generate_initial_levels(kinds, rng=random.Random(1))
    assert [level.id for level in levels] == list(range(1, 51))
    assert [level.id for level in levels if level.unlocked] == [1]
    assert levels[0].moves == 21
    assert levels[0].score_objective().target == 1500
    assert len(levels[0].objectives) == 1

    third = levels[2]
    assert third.moves == 23
    collect = [obj for obj in third.objectives if obj.kind is ObjectiveKind.COLLECT_KIND]
    assert len(collect) == 1
    assert collect[0].target == 15
    assert collect[0].target_kind in kinds
    sixth_collect = [obj for obj in levels[5].objectives if obj.kind is ObjectiveKind.COLLECT_KIND]
    assert sixth_collect[0].target == 20


def test_move_budget_rounds_halves_up():
    levels = generate_initial_levels(list(DEFAULT_TILE_KINDS), rng=random.Random(1))
    assert levels[9].moves == 31
    assert levels[49].moves == 73


def test_record_completion_keeps_best_stars():
    catalog = LevelCatalog(levels=default_levels())
    unlocked = catalog.record_completion(1, 2)
    assert unlocked is not None and unlocked.id == 2
    assert catalog.record_completion(1, 1) is None
    assert catalog.find(1).stars == 2
    assert catalog.record_completion(2, 3) is None
    assert catalog.find(2).completed
    assert catalog.record_completion(42, 3) is None


def test_locked_or_unknown_level_is_rejected():
    session = GameSession(levels=default_levels(), rng=random.Random(1))
    with pytest.raises(LevelUnavailableError):
        session.initialize_game(2)
    with pytest.raises(LevelUnavailableError):
        session.initialize_game(99)
    assert session.phase is GamePhase.MENU
    assert session.current_level is None


def test_scripted_grid_with_hole_is_refused():
    session = GameSession(levels=default_levels(), rng=random.Random(1))
    grid = grid_from_rows(base_rows())
    grid.set((0, 0), None)
    with pytest.raises(EngineInvariantError):
        session.initialize_game(1, grid=grid)
    assert session.phase is GamePhase.MENU


def test_initialize_game_resets_session_state():
    session = GameSession(levels=default_levels(), rng=random.Random(1))
    recorder = EventRecorder(session.event_bus, EVENT_LEVEL_STARTED, EVENT_GAME_MODE_CHANGED)
    session.initialize_game(1)
    assert session.phase is GamePhase.PLAYING
    assert session.score == 0
    assert session.moves_left == 20
    assert session.captures == {}
    assert session.current_level.id == 1
    assert find_all_matches(session.grid) == []
    assert recorder.of(EVENT_LEVEL_STARTED) == [{'level_id': 1, 'moves': 20}]
    assert recorder.of(EVENT_GAME_MODE_CHANGED)[0]['new_mode'] is GamePhase.PLAYING


def test_restart_level_starts_over():
    session = start_session(NEAR_MATCH)
    session.swap((2, 4), (3, 4))
    assert session.score > 0

    session.restart_level()

    assert session.phase is GamePhase.PLAYING
    assert session.score == 0
    assert session.moves_left == 20
    assert session.captures == {}
    assert find_all_matches(session.grid) == []


def test_restart_without_level_returns_to_menu():
    session = GameSession(levels=[Level(id=1, moves=5, objectives=[Objective.score(10)], unlocked=True)])
    session.restart_level()
    assert session.phase is GamePhase.MENU
    assert session.current_level is None


def test_scripted_grid_is_copied():
    session = GameSession(levels=default_levels(), rng=random.Random(1))
    grid = grid_from_rows(base_rows())
    session.initialize_game(1, grid=grid)

    for col in range(3):
        grid.get((0, col)).kind = 'blue'

    assert find_all_matches(session.grid) == []
    assert session.grid.kind_at((0, 1)) == 'red'


def test_scripted_grid_must_match_session_size():
    session = GameSession(levels=default_levels(), rng=random.Random(1))
    with pytest.raises(ValueError):
        session.initialize_game(1, grid=grid_from_rows(base_rows(5)))
    assert session.phase is GamePhase.MENU
    assert session.current_level is None
    assert session.grid.size == 8
