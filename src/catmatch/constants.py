GRID_SIZE = 8
MIN_MATCH_SIZE = 3

# Regular tile kinds -> display colour. Renderers may override per kind with custom assets.
DEFAULT_TILE_KINDS = {
    'blue':   '#4dabf7',
    'red':    '#fa5252',
    'green':  '#40c057',
    'yellow': '#ffd43b',
    'purple': '#ae3ec9',
    'orange': '#ff922b',
    'pink':   '#f06595',
    'cyan':   '#15aabf',
}

# Points awarded per match by run length; longer runs score LARGE_MATCH_POINTS_PER_TILE * length.
MATCH_POINTS = {
    3: 50,
    4: 100,
    5: 200,
    6: 300,
    7: 500,
    8: 1000,
}
LARGE_MATCH_POINTS_PER_TILE = 150

# Flat per-cell bonuses for power-up clears (independent of MATCH_POINTS).
AREA_CLEAR_POINTS_PER_TILE = 20
KIND_CLEAR_POINTS_PER_TILE = 50
AREA_CLEAR_RADIUS = 1

# Resolving loop safety cap; exceeding it is an internal error, not a game rule.
MAX_CASCADE_ITERATIONS = 1000
# Attempts allowed when scrubbing accidental matches out of a freshly generated board.
MAX_INITIAL_BOARD_PASSES = 500

# Seconds each cascade stage stays on screen; 0 disables pacing (headless sessions, tests).
ANIMATION_DURATION = 0.3

# Level catalogue generation.
LEVEL_COUNT = 50
LEVEL_BASE_MOVES = 20
LEVEL_MOVES_GROWTH = 1.05
LEVEL_BASE_SCORE = 1000
LEVEL_SCORE_STEP = 500
COLLECT_OBJECTIVE_EVERY = 3
COLLECT_BASE_TARGET = 10
COLLECT_TARGET_STEP = 5

# Star rating thresholds relative to the Score objective target.
THREE_STAR_RATIO = 1.5
TWO_STAR_RATIO = 1.2
