from catmatch.components.game_state import GamePhase
from catmatch.components.level import Level, Objective
from catmatch.events.bus import EVENT_GAME_OVER, EVENT_LEVEL_COMPLETED, EVENT_LEVEL_UNLOCKED
from catmatch.systems.objectives import calculate_stars, is_level_complete
from tests.helpers import EventRecorder, base_rows, start_session, with_cells

NEAR_MATCH = with_cells(base_rows(), {(3, 2): 'B', (3, 3): 'B', (2, 4): 'B'})


def mixed_level():
    return Level(id=1, moves=20, objectives=[Objective.score(1000), Objective.collect('green', 10)], unlocked=True)


def test_every_objective_must_be_met():
    level = mixed_level()
    assert not is_level_complete(level, 1200, {'green': 5})
    # Evaluation is pure and repeatable.
    assert not is_level_complete(level, 1200, {'green': 5})
    assert not is_level_complete(level, 900, {'green': 12})
    assert is_level_complete(level, 1000, {'green': 10})


def test_level_without_objectives_is_trivially_complete():
    assert is_level_complete(Level(id=9, moves=1), 0, {})


def test_star_rating():
    level = mixed_level()
    assert calculate_stars(level, 1500, 3) == 3
    assert calculate_stars(level, 1500, 0) == 2
    assert calculate_stars(level, 1200, 5) == 2
    assert calculate_stars(level, 1000, 5) == 1
    collect_only = Level(id=2, moves=5, objectives=[Objective.collect('red', 3)])
    assert calculate_stars(collect_only, 99999, 5) == 1


def test_last_move_completes_level_and_unlocks_next():
    levels = [
        Level(id=1, moves=1, objectives=[Objective.score(0)], unlocked=True),
        Level(id=2, moves=10, objectives=[Objective.score(100)]),
    ]
    session = start_session(NEAR_MATCH, levels=levels)
    recorder = EventRecorder(session.event_bus, EVENT_LEVEL_COMPLETED, EVENT_LEVEL_UNLOCKED, EVENT_GAME_OVER)

    session.swap((2, 4), (3, 4))

    assert session.moves_left == 0
    assert session.phase is GamePhase.LEVEL_COMPLETE
    completed = recorder.of(EVENT_LEVEL_COMPLETED)
    assert len(completed) == 1
    assert completed[0]['level_id'] == 1
    # No moves remain when the verdict is taken, so the third star is out of reach.
    assert completed[0]['stars'] == 2
    assert recorder.of(EVENT_LEVEL_UNLOCKED) == [{'level_id': 2}]
    assert recorder.of(EVENT_GAME_OVER) == []
    assert session.catalog.find(1).completed
    assert session.catalog.find(1).stars == 2
    assert session.catalog.find(2).unlocked

    session.initialize_game(2)
    assert session.phase is GamePhase.PLAYING
    assert session.moves_left == 10


def test_last_move_without_objectives_met_is_game_over():
    levels = [Level(id=1, moves=1, objectives=[Objective.score(10 ** 9)], unlocked=True)]
    session = start_session(NEAR_MATCH, levels=levels)
    recorder = EventRecorder(session.event_bus, EVENT_GAME_OVER, EVENT_LEVEL_COMPLETED)

    session.swap((2, 4), (3, 4))

    assert session.phase is GamePhase.GAME_OVER
    assert recorder.of(EVENT_GAME_OVER)[0]['level_id'] == 1
    assert recorder.of(EVENT_LEVEL_COMPLETED) == []
    assert not session.catalog.find(1).completed

    # Further input is ignored once the level has ended.
    session.select_tile((0, 0))
    assert session.selected is None


def test_objectives_are_not_judged_while_moves_remain():
    levels = [Level(id=1, moves=5, objectives=[Objective.score(0)], unlocked=True)]
    session = start_session(NEAR_MATCH, levels=levels)
    session.swap((2, 4), (3, 4))
    assert session.phase is GamePhase.PLAYING
    assert session.moves_left == 4
