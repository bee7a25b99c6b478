from collections import deque
from typing import Deque, Optional

from esper import World

from catmatch.components.animation_stage import StageAnimation
from catmatch.constants import ANIMATION_DURATION
from catmatch.events.bus import (
    EventBus,
    EVENT_TICK,
    EVENT_ANIMATION_START,
    EVENT_ANIMATION_COMPLETE,
    EVENT_CASCADE_STAGE,
    EVENT_TILE_SWAP_REVERTED,
)
from catmatch.systems.turn_state_utils import get_or_create_turn_state


class AnimationSystem:
    """Paces cascade snapshots for a renderer; each frame is its own entity.

    The engine resolves a whole cascade synchronously and publishes one snapshot
    per stage. Frames are played back in order on ``tick`` and keep the session
    busy until the queue drains. A non-positive duration disables pacing.
    """
    def __init__(self, world: World, event_bus: EventBus, *, duration: float = ANIMATION_DURATION):
        self.world = world
        self.event_bus = event_bus
        self.duration = duration
        self._queue: Deque[int] = deque()
        event_bus.subscribe(EVENT_TICK, self.on_tick)
        event_bus.subscribe(EVENT_CASCADE_STAGE, self.on_cascade_stage)
        event_bus.subscribe(EVENT_TILE_SWAP_REVERTED, self.on_swap_reverted)

    @property
    def enabled(self) -> bool:
        return self.duration > 0.0

    def current_frame(self) -> Optional[StageAnimation]:
        if not self._queue:
            return None
        return self.world.component_for_entity(self._queue[0], StageAnimation)

    def on_cascade_stage(self, sender, **kwargs):
        grid = kwargs.get('grid')
        if grid is None:
            return
        self._enqueue(StageAnimation(
            kind=kwargs.get('stage', 'stage'),
            grid=grid,
            duration=self.duration,
            depth=kwargs.get('depth', 0),
            positions=list(kwargs.get('positions', [])),
        ))

    def on_swap_reverted(self, sender, **kwargs):
        src = kwargs.get('src'); dst = kwargs.get('dst')
        attempted = kwargs.get('attempted'); restored = kwargs.get('restored')
        if attempted is None or restored is None:
            return
        self._enqueue(StageAnimation(kind='swap_attempt', grid=attempted, duration=self.duration, positions=[src, dst]))
        self._enqueue(StageAnimation(kind='swap_revert', grid=restored, duration=self.duration, positions=[src, dst]))

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1/60)
        while self._queue and dt > 0.0:
            frame = self.current_frame()
            needed = frame.duration - frame.elapsed
            if dt < needed:
                frame.elapsed += dt
                return
            dt -= needed
            frame.elapsed = frame.duration
            self._finish_head()

    def reset(self) -> None:
        while self._queue:
            self.world.delete_entity(self._queue.popleft(), immediate=True)
        get_or_create_turn_state(self.world).pending_animations = 0

    def _enqueue(self, frame: StageAnimation) -> None:
        if not self.enabled:
            return
        entity = self.world.create_entity(frame)
        self._queue.append(entity)
        get_or_create_turn_state(self.world).pending_animations = len(self._queue)
        if len(self._queue) == 1:
            self._start(frame)

    def _start(self, frame: StageAnimation) -> None:
        self.event_bus.emit(EVENT_ANIMATION_START, kind=frame.kind, items=list(frame.positions), meta={'depth': frame.depth})

    def _finish_head(self) -> None:
        entity = self._queue.popleft()
        frame = self.world.component_for_entity(entity, StageAnimation)
        self.world.delete_entity(entity, immediate=True)
        get_or_create_turn_state(self.world).pending_animations = len(self._queue)
        self.event_bus.emit(EVENT_ANIMATION_COMPLETE, kind=frame.kind, items=list(frame.positions))
        if self._queue:
            self._start(self.current_frame())
