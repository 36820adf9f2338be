"""
Preset sign patterns (peace, thumbs up, rock) mapped to bundles of parameter values.
"""
import copy
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from .landmarks import (
    INDEX_TIP,
    MIDDLE_TIP,
    PINKY_TIP,
    RING_TIP,
    THUMB_TIP,
    WRIST,
    is_valid,
    palm_center,
    tip_distance,
)
from .types import GestureUpdate, HandObservation

logger = logging.getLogger(__name__)

FINGER_EXTENDED_THRESHOLD = 0.15
FINGER_CLOSED_THRESHOLD = 0.08
THUMB_RAISE_MIN = 0.05  # thumb tip must sit this far above the wrist
THUMB_RAISE_FULL = 0.15
EXTENDED_REACH_FULL = 0.4
MIN_CONFIDENCE = 0.6

PRESET_ORDER = ("peace", "thumbs_up", "rock")


@dataclass
class PresetConfig:
    """Named bundle of parameter values applied when a sign pattern is shown."""
    name: str
    description: str
    parameters: Dict[str, str] = field(default_factory=dict)


@dataclass
class PresetMatch:
    """Pattern reported by the detector together with its bundle."""
    type: str
    confidence: float
    preset: PresetConfig

    def to_updates(self) -> List[GestureUpdate]:
        """One GestureUpdate per bundle entry, at the detection confidence."""
        return [
            GestureUpdate(path=path, value=value, confidence=self.confidence)
            for path, value in self.preset.parameters.items()
        ]


DEFAULT_PRESETS: Dict[str, PresetConfig] = {
    "peace": PresetConfig(
        name="Cinematic",
        description="Dramatic, cinematic lighting and mood",
        parameters={
            "aesthetics.mood_atmosphere": "cinematic, dramatic",
            "lighting.conditions": "dramatic rim lighting",
        },
    ),
    "thumbs_up": PresetConfig(
        name="Optimistic",
        description="Bright, optimistic, warm colors",
        parameters={
            "aesthetics.mood_atmosphere": "bright, optimistic",
            "aesthetics.color_scheme": "warm, vibrant",
        },
    ),
    "rock": PresetConfig(
        name="Edgy",
        description="Bold, high contrast, dramatic shadows",
        parameters={
            "aesthetics.mood_atmosphere": "edgy, bold",
            "lighting.shadows": "high contrast, dramatic shadows",
        },
    ),
}


class PresetDetector:
    """
    Detects preset sign patterns from a single hand.

    Patterns are tried in a fixed priority order and the first one whose
    confidence reaches MIN_CONFIDENCE is reported, even if a later pattern
    would score higher.
    """

    def __init__(self, custom_presets: Optional[Dict[str, PresetConfig]] = None):
        self.presets = copy.deepcopy(DEFAULT_PRESETS)
        if custom_presets:
            self.presets.update(copy.deepcopy(custom_presets))

    def detect(self, hand: HandObservation) -> Optional[PresetMatch]:
        """
        Detect a preset pattern.

        Args:
            hand: Hand observation (21 landmarks)

        Returns:
            PresetMatch for the first accepted pattern, or None
        """
        if not is_valid(hand):
            return None

        scorers = {
            "peace": self._peace_confidence,
            "thumbs_up": self._thumbs_up_confidence,
            "rock": self._rock_confidence,
        }
        for preset_type in PRESET_ORDER:
            confidence = scorers[preset_type](hand)
            if confidence >= MIN_CONFIDENCE:
                return PresetMatch(type=preset_type, confidence=confidence, preset=self.presets[preset_type])
        return None

    def _distances(self, hand: HandObservation) -> Dict[int, float]:
        palm = palm_center(hand.landmarks)
        return {
            tip: tip_distance(hand.landmarks, tip, palm)
            for tip in (THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)
        }

    @staticmethod
    def _two_up_two_down(d: Dict[int, float], up: tuple, down: tuple) -> float:
        # Far extended fingers and tightly curled fingers both raise confidence
        if not all(d[t] > FINGER_EXTENDED_THRESHOLD for t in up):
            return 0.0
        if not all(d[t] < FINGER_CLOSED_THRESHOLD for t in down):
            return 0.0
        extended_score = min(1.0, sum(d[t] for t in up) / EXTENDED_REACH_FULL)
        closed_score = min(1.0, sum(1 - d[t] for t in down)) / 2
        return min(1.0, (extended_score + closed_score) / 2)

    def _peace_confidence(self, hand: HandObservation) -> float:
        d = self._distances(hand)
        return self._two_up_two_down(d, up=(INDEX_TIP, MIDDLE_TIP), down=(RING_TIP, PINKY_TIP))

    def _rock_confidence(self, hand: HandObservation) -> float:
        d = self._distances(hand)
        return self._two_up_two_down(d, up=(INDEX_TIP, PINKY_TIP), down=(MIDDLE_TIP, RING_TIP))

    def _thumbs_up_confidence(self, hand: HandObservation) -> float:
        wrist = hand.landmarks[WRIST]
        thumb_tip = hand.landmarks[THUMB_TIP]
        if not thumb_tip.y < wrist.y - THUMB_RAISE_MIN:
            return 0.0

        d = self._distances(hand)
        if not all(d[t] < FINGER_CLOSED_THRESHOLD for t in (INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)):
            return 0.0

        thumb_score = min(1.0, (wrist.y - thumb_tip.y) / THUMB_RAISE_FULL)
        closed_score = min(1.0, (1 - d[INDEX_TIP]) + (1 - d[MIDDLE_TIP])) / 2
        return min(1.0, (thumb_score + closed_score) / 2)

    def update_preset(self, preset_type: str, config: PresetConfig) -> None:
        """Replace the bundle bound to a pattern."""
        if preset_type not in PRESET_ORDER:
            raise KeyError(f"Unknown preset gesture: {preset_type}")
        self.presets[preset_type] = copy.deepcopy(config)

    def get_preset(self, preset_type: str) -> PresetConfig:
        return self.presets[preset_type]

    def all_presets(self) -> Dict[str, PresetConfig]:
        return copy.deepcopy(self.presets)

    def reset_presets(self) -> None:
        """Restore the default bundles."""
        self.presets = copy.deepcopy(DEFAULT_PRESETS)


def save_presets(presets: Dict[str, PresetConfig], path: Union[str, Path]) -> bool:
    """
    Save preset bundles to a YAML file.

    Returns:
        True on success; failures are logged, not raised
    """
    try:
        with open(path, "w") as f:
            yaml.safe_dump({k: asdict(v) for k, v in presets.items()}, f, sort_keys=False)
        return True
    except OSError as e:
        logger.error("Failed to save presets to %s: %s", path, e)
        return False


def load_presets(path: Union[str, Path]) -> Optional[Dict[str, PresetConfig]]:
    """
    Load preset bundles saved by `save_presets`.

    Returns:
        Mapping of pattern name to PresetConfig, or None if the file is missing or unreadable
    """
    preset_path = Path(path)
    if not preset_path.exists():
        return None
    try:
        with open(preset_path, "r") as f:
            data = yaml.safe_load(f) or {}
        return {
            key: PresetConfig(
                name=value["name"],
                description=value.get("description", ""),
                parameters=dict(value.get("parameters", {})),
            )
            for key, value in data.items()
        }
    except (OSError, yaml.YAMLError, KeyError, TypeError, AttributeError) as e:
        logger.error("Failed to load presets from %s: %s", preset_path, e)
        return None
