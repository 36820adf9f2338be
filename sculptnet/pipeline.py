"""
Per-frame gesture pipeline: classifiers, hand state, presets and coordinator.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .config import MAX_DETECTION_FPS, MIN_DETECTION_FPS, Cfg, default_config
from .coordinator import CoalescingCoordinator, CommitTicket
from .gestures import FrameCompositionGesture, PinchGesture, VerticalLightingGesture, WristRotationGesture
from .hand_state import HandStateMachine
from .landmarks import validate_observation
from .presets import PresetDetector, PresetMatch, load_presets
from .store import ParameterStore
from .types import GenerationHook, GestureUpdate, HandObservation, HandPosture, ObservationRejection

logger = logging.getLogger(__name__)


def clamp_detection_rate(fps: float) -> float:
    """Clamp a requested observation rate into the supported 10-30 Hz range."""
    clamped = max(MIN_DETECTION_FPS, min(MAX_DETECTION_FPS, fps))
    if clamped != fps:
        logger.warning("Detection rate %s Hz out of range, using %s Hz", fps, clamped)
    return clamped


@dataclass
class FrameResult:
    """Everything one frame produced."""
    updates: List[GestureUpdate] = field(default_factory=list)
    applied: List[GestureUpdate] = field(default_factory=list)
    triggered: bool = False
    commit: Optional[CommitTicket] = None
    preset: Optional[PresetMatch] = None
    posture: HandPosture = HandPosture.AMBIGUOUS
    rejected: List[ObservationRejection] = field(default_factory=list)


class GesturePipeline:
    """
    Main gesture processor that turns hand observations into store updates.

    Must be driven from a running asyncio loop when a generation hook is
    configured, since an accepted commit is started as a task.
    """

    def __init__(
        self,
        store: ParameterStore,
        hook: Optional[GenerationHook] = None,
        cfg: Optional[Cfg] = None,
        coordinator: Optional[CoalescingCoordinator] = None,
        clock=time.monotonic,
    ):
        """Initialize the pipeline with its store, generation hook and configuration."""
        self.cfg = cfg or default_config()
        self.store = store
        self.clock = clock
        self.coordinator = coordinator or CoalescingCoordinator(
            store, hook=hook, cfg=self.cfg.coordinator, clock=clock
        )

        self.hand_state = HandStateMachine()
        self.pinch = PinchGesture()
        self.rotation = WristRotationGesture()
        self.lighting = VerticalLightingGesture()
        self.composition = FrameCompositionGesture()
        self.presets = PresetDetector(self._custom_presets())

        self.detection_fps = clamp_detection_rate(self.cfg.detection.fps)

    def _custom_presets(self):
        if not self.cfg.presets.path:
            return None
        return load_presets(self.cfg.presets.path)

    @property
    def detection_interval(self) -> float:
        """Seconds between observation ticks at the configured rate."""
        return 1.0 / self.detection_fps

    def set_detection_rate(self, fps: float) -> float:
        self.detection_fps = clamp_detection_rate(fps)
        return self.detection_fps

    def process_frame(self, hands: Sequence[HandObservation], t_now: Optional[float] = None) -> FrameResult:
        """
        Process one observation tick.

        Args:
            hands: Hand observations; only the first `detection.num_hands` valid ones are used
            t_now: Current time in seconds; defaults to the pipeline clock

        Returns:
            FrameResult with the submitted and applied updates
        """
        t_now = self.clock() if t_now is None else t_now
        result = FrameResult(posture=self.hand_state.posture)

        valid: List[HandObservation] = []
        for hand in hands or ():
            checked = validate_observation(hand)
            if isinstance(checked, ObservationRejection):
                logger.debug("Ignoring observation: %s", checked.reason)
                result.rejected.append(checked)
            else:
                valid.append(checked)

        if len(valid) > self.cfg.detection.num_hands:
            logger.debug("Using %d of %d hands", self.cfg.detection.num_hands, len(valid))
            valid = valid[:self.cfg.detection.num_hands]

        if valid:
            self._classify(valid, t_now, result)

        result.applied = self.coordinator.poll(t_now)
        return result

    def _classify(self, hands: List[HandObservation], t_now: float, result: FrameResult) -> None:
        primary = hands[0]

        result.triggered = self.hand_state.detect_trigger(primary)
        result.posture = self.hand_state.posture
        if result.triggered:
            # The trigger frame only starts a commit; no parameter updates
            result.commit = self.coordinator.try_commit("gesture")
            return

        candidates = [
            self.pinch.update(primary),
            self.rotation.update(primary),
            self.lighting.update(primary),
        ]
        if len(hands) >= 2:
            candidates.append(self.composition.update(hands[0], hands[1]))

        if self.cfg.presets.enabled:
            result.preset = self.presets.detect(primary)
            if result.preset is not None:
                candidates.extend(result.preset.to_updates())

        for update in candidates:
            if self.coordinator.submit(update, t_now):
                result.updates.append(update)

    def manual_commit(self) -> CommitTicket:
        """Request a commit outside the gesture trigger, under the same guard."""
        return self.coordinator.try_commit("manual")

    def reset(self) -> None:
        """Reset hand state, smoothing history and any buffered updates."""
        self.hand_state.reset()
        self.lighting.reset()
        self.coordinator.reset()
        logger.info("Gesture pipeline reset")
