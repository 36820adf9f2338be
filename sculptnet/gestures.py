"""
Gesture classifiers that convert hand landmarks into parameter updates.
"""
import math
from collections import deque
from typing import Optional

import numpy as np

from .landmarks import INDEX_TIP, MIDDLE_MCP, THUMB_TIP, WRIST, bounding_box, distance, is_valid
from .types import GestureUpdate, HandObservation

LENS_PATH = "photographic_characteristics.lens_focal_length"
CAMERA_ANGLE_PATH = "photographic_characteristics.camera_angle"
LIGHTING_PATH = "lighting.conditions"
COMPOSITION_PATH = "aesthetics.composition"

# Pinch → field of view
FOV_MIN = 35
FOV_MAX = 120
PINCH_DISTANCE_MIN = 0.02
PINCH_DISTANCE_MAX = 0.25
PINCH_TOLERANCE = 1e-6  # applied to both ends of the pinch domain

# Upper FOV bound (inclusive) for each lens label, narrowest first
LENS_BUCKETS = (
    (45, "200mm telephoto"),
    (55, "85mm portrait"),
    (70, "50mm standard"),
    (90, "35mm wide"),
    (FOV_MAX, "24mm ultra-wide"),
)
LENS_FOV = {
    "200mm telephoto": 40,
    "85mm portrait": 50,
    "50mm standard": 60,
    "35mm wide": 80,
    "24mm ultra-wide": 110,
}
DEFAULT_LENS_FOV = 60

# Wrist rotation → camera angle (degrees, 0 = hand pointing up)
ANGLE_LOW_DUTCH_MAX = -15
ANGLE_EYE_LEVEL_MAX = 15
ANGLE_HIGH_ANGLE_MAX = 45

CAMERA_ANGLES = {
    "low_dutch_tilt": "low dutch tilt",
    "eye_level": "eye level",
    "high_angle": "high angle",
    "birds_eye_view": "bird's eye view",
}

# Vertical position → lighting (y = 0 is the top of the frame)
LIGHTING_NIGHT_MAX = 0.3
LIGHTING_GOLDEN_MAX = 0.5
LIGHTING_VOLUMETRIC_MAX = 0.7
WRIST_HISTORY_SIZE = 5

LIGHTING_PRESETS = {
    "night": "night, moonlight from above",
    "golden_hour": "golden hour from top",
    "volumetric": "soft volumetric god rays from left",
    "studio": "bright studio lighting",
}

# Two-hand frame → composition
PANORAMIC_ASPECT = 1.5
CENTER_MIN = 0.4
CENTER_MAX = 0.6
THIRDS = (1 / 3, 2 / 3)

COMPOSITION_PRESETS = {
    "centered": "subject centered",
    "rule_of_thirds": "rule of thirds",
    "panoramic": "panoramic composition",
}


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fov_to_lens(fov: float) -> str:
    """Bucket a field of view (degrees) into one of the five lens labels."""
    for upper, label in LENS_BUCKETS:
        if fov <= upper:
            return label
    return LENS_BUCKETS[-1][1]


def lens_to_fov(lens: str) -> int:
    """Representative field of view for a lens label (unknown labels map to 60)."""
    return LENS_FOV.get(lens, DEFAULT_LENS_FOV)


class PinchGesture:
    """
    Maps thumb-index pinch distance to a lens preset.

    A tighter pinch gives a narrower field of view. Distances outside the
    valid domain are treated as "not pinching" and produce no update.
    """

    def update(self, hand: HandObservation) -> Optional[GestureUpdate]:
        """
        Classify one hand.

        Args:
            hand: Hand observation (21 landmarks)

        Returns:
            GestureUpdate for the lens, or None if there is no valid pinch
        """
        if not is_valid(hand):
            return None

        thumb_tip = hand.landmarks[THUMB_TIP]
        index_tip = hand.landmarks[INDEX_TIP]
        pinch = distance(thumb_tip, index_tip)

        if pinch < PINCH_DISTANCE_MIN - PINCH_TOLERANCE or pinch > PINCH_DISTANCE_MAX + PINCH_TOLERANCE:
            return None
        pinch = clamp(pinch, PINCH_DISTANCE_MIN, PINCH_DISTANCE_MAX)

        normalized = (pinch - PINCH_DISTANCE_MIN) / (PINCH_DISTANCE_MAX - PINCH_DISTANCE_MIN)
        fov = round_half_up(FOV_MIN + normalized * (FOV_MAX - FOV_MIN))

        return GestureUpdate(
            path=LENS_PATH,
            value=fov_to_lens(fov),
            confidence=self._confidence(thumb_tip.z, index_tip.z, pinch),
        )

    @staticmethod
    def _confidence(thumb_z: float, index_z: float, pinch: float) -> float:
        # Tighter pinch and fingertips on the same depth plane both raise confidence
        distance_score = 1 - pinch / PINCH_DISTANCE_MAX
        depth_score = max(0.0, 1 - abs(thumb_z - index_z) * 10)
        return clamp((distance_score + depth_score) / 2, 0.0, 1.0)


class WristRotationGesture:
    """Maps the wrist → middle-knuckle direction to a camera angle preset."""

    def update(self, hand: HandObservation) -> Optional[GestureUpdate]:
        if not is_valid(hand):
            return None

        wrist = hand.landmarks[WRIST]
        middle_base = hand.landmarks[MIDDLE_MCP]

        angle_rad = math.atan2(middle_base.y - wrist.y, middle_base.x - wrist.x)
        adjusted = math.degrees(angle_rad) - 90

        return GestureUpdate(
            path=CAMERA_ANGLE_PATH,
            value=self.classify(adjusted),
            confidence=clamp(abs(math.cos(angle_rad)) + 0.5, 0.0, 1.0),
        )

    @staticmethod
    def classify(adjusted_angle: float) -> str:
        """Bucket an adjusted angle (degrees, 0 = pointing up) into a camera angle."""
        if adjusted_angle < ANGLE_LOW_DUTCH_MAX:
            return CAMERA_ANGLES["low_dutch_tilt"]
        if adjusted_angle < ANGLE_EYE_LEVEL_MAX:
            return CAMERA_ANGLES["eye_level"]
        if adjusted_angle < ANGLE_HIGH_ANGLE_MAX:
            return CAMERA_ANGLES["high_angle"]
        return CAMERA_ANGLES["birds_eye_view"]


class VerticalLightingGesture:
    """
    Maps the smoothed wrist height to a lighting preset.

    Keeps its own ring buffer of the most recent wrist y values; each
    instance smooths independently.
    """

    def __init__(self, history_size: int = WRIST_HISTORY_SIZE):
        self.wrist_y_history: deque = deque(maxlen=history_size)

    def update(self, hand: HandObservation) -> Optional[GestureUpdate]:
        if not is_valid(hand):
            return None

        self.wrist_y_history.append(hand.landmarks[WRIST].y)
        samples = np.fromiter(self.wrist_y_history, dtype=float)
        smoothed_y = float(samples.mean())

        return GestureUpdate(
            path=LIGHTING_PATH,
            value=self.classify(smoothed_y),
            confidence=self._confidence(samples),
        )

    @staticmethod
    def classify(y: float) -> str:
        if y < LIGHTING_NIGHT_MAX:
            return LIGHTING_PRESETS["night"]
        if y < LIGHTING_GOLDEN_MAX:
            return LIGHTING_PRESETS["golden_hour"]
        if y < LIGHTING_VOLUMETRIC_MAX:
            return LIGHTING_PRESETS["volumetric"]
        return LIGHTING_PRESETS["studio"]

    @staticmethod
    def _confidence(samples: np.ndarray) -> float:
        # Not enough history to judge stability yet
        if len(samples) < 2:
            return 0.5
        return clamp(1 - float(samples.var()) * 10, 0.3, 1.0)

    def reset(self) -> None:
        """Drop the smoothing history."""
        self.wrist_y_history.clear()


class FrameCompositionGesture:
    """
    Maps a two-hand framing gesture to a composition preset.

    Works on the bounding box of both hands, so the result does not depend
    on which hand is passed first.
    """

    def update(self, first: HandObservation, second: HandObservation) -> Optional[GestureUpdate]:
        """
        Classify a pair of hands.

        Args:
            first: One hand observation
            second: The other hand observation

        Returns:
            GestureUpdate for the composition, or None if either hand is invalid
        """
        if not (is_valid(first) and is_valid(second)):
            return None

        min_x, min_y, max_x, max_y = bounding_box(first, second)
        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        width = max_x - min_x
        height = max_y - min_y

        if height > 0:
            aspect = width / height
        else:
            aspect = math.inf if width > 0 else 1.0

        if aspect > PANORAMIC_ASPECT:
            value = COMPOSITION_PRESETS["panoramic"]
            confidence = min(1.0, (aspect - PANORAMIC_ASPECT) / 0.5 + 0.7)
        elif CENTER_MIN <= center_x <= CENTER_MAX and CENTER_MIN <= center_y <= CENTER_MAX:
            value = COMPOSITION_PRESETS["centered"]
            deviation = abs(center_x - 0.5) + abs(center_y - 0.5)
            confidence = max(0.5, 1 - deviation)
        else:
            value = COMPOSITION_PRESETS["rule_of_thirds"]
            confidence = self._thirds_confidence(center_x, center_y)

        return GestureUpdate(path=COMPOSITION_PATH, value=value, confidence=confidence)

    @staticmethod
    def _thirds_confidence(center_x: float, center_y: float) -> float:
        x_dev = min(abs(center_x - t) for t in THIRDS)
        y_dev = min(abs(center_y - t) for t in THIRDS)
        return max(0.4, 1 - (x_dev + y_dev) / 2 * 3)
