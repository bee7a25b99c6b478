from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems alive even when nobody stores the system.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col


# ============================================================================
# SWAPS
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src, dst, power_up=bool
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src, dst, reason=str ('not_adjacent'|'no_match')
EVENT_TILE_SWAP_REVERTED = "tile_swap_reverted"    # payload: src, dst, attempted=Grid, restored=Grid
EVENT_TILE_SWAP_FINALIZE = "tile_swap_finalize"    # payload: src, dst, power_up=bool
EVENT_MOVE_REJECTED = "move_rejected"              # payload: src, dst (feedback cue for audio/visuals)
EVENT_MOVES_CHANGED = "moves_changed"              # payload: remaining=int, delta=int


# ============================================================================
# MATCHES & CASCADES
# ============================================================================
EVENT_MATCH_FOUND = "match_found"                  # payload: matches=list[list[(r,c)]], positions=[(r,c),...], depth=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], types=[(r,c,kind),...], points=int, source=str
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int, source=str
EVENT_CAPTURE_TALLY_CHANGED = "capture_tally_changed"  # payload: counts=dict[str,int], delta=dict[str,int]
EVENT_POWER_UP_SPAWNED = "power_up_spawned"        # payload: position=(r,c), kind=str
EVENT_POWER_UP_ACTIVATED = "power_up_activated"    # payload: position=(r,c), kind=str, target_kind=str|None, positions=[(r,c),...]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=list[GravityMove]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STAGE = "cascade_stage"              # payload: stage=str, depth=int, grid=Grid (snapshot), positions=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int


# ============================================================================
# ANIMATION
# ============================================================================
EVENT_ANIMATION_START = "animation_start"          # payload: kind=str, items=list, meta=dict
EVENT_ANIMATION_COMPLETE = "animation_complete"    # payload: kind=str, items=list


# ============================================================================
# GAME FLOW & LEVELS
# ============================================================================
EVENT_GAME_MODE_CHANGED = "game_mode_changed"      # payload: previous_mode=GamePhase|None, new_mode=GamePhase
EVENT_LEVEL_STARTED = "level_started"              # payload: level_id=int, moves=int
EVENT_LEVEL_COMPLETED = "level_completed"          # payload: level_id=int, score=int, stars=int
EVENT_LEVEL_UNLOCKED = "level_unlocked"            # payload: level_id=int
EVENT_GAME_OVER = "game_over"                      # payload: level_id=int|None, score=int
EVENT_SESSION_FAULTED = "session_faulted"          # payload: error=str
