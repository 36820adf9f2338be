"""
Hand landmark topology and geometry helpers.

All helpers assume the MediaPipe 21-point hand topology. Observations are
checked with `validate_observation` before any per-finger index is read.
"""
import math
from numbers import Real
from typing import Sequence, Tuple, Union

import numpy as np

from .types import HandObservation, Landmark, ObservationRejection

NUM_LANDMARKS = 21

WRIST = 0
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_TIP = 12
RING_MCP = 13
RING_TIP = 16
PINKY_MCP = 17
PINKY_TIP = 20

# Wrist plus the four non-thumb knuckles
PALM_INDICES = (WRIST, INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP)
FINGERTIPS = (INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)


def validate_observation(hand) -> Union[HandObservation, ObservationRejection]:
    """
    Check that a hand observation has the fixed 21-point shape.

    Args:
        hand: Candidate observation

    Returns:
        The observation itself, or an ObservationRejection describing the problem
    """
    if hand is None:
        return ObservationRejection("no observation")
    landmarks = getattr(hand, "landmarks", None)
    if landmarks is None:
        return ObservationRejection(f"expected HandObservation, got {type(hand).__name__}")
    if len(landmarks) != NUM_LANDMARKS:
        return ObservationRejection(f"expected {NUM_LANDMARKS} landmarks, got {len(landmarks)}")
    for point in landmarks:
        if not isinstance(point, Landmark):
            return ObservationRejection("landmarks must be (x, y, z) triples")
        if not all(isinstance(c, Real) and math.isfinite(c) for c in point):
            return ObservationRejection("landmark coordinates must be finite")
    return hand


def is_valid(hand) -> bool:
    """Return True if the observation passes shape validation."""
    return not isinstance(validate_observation(hand), ObservationRejection)


def distance(a: Landmark, b: Landmark) -> float:
    """3D Euclidean distance between two landmarks."""
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.z - b.z) ** 2)


def distance_2d(a: Landmark, b: Landmark) -> float:
    """Planar distance, ignoring depth."""
    return math.hypot(a.x - b.x, a.y - b.y)


def palm_center(landmarks: Sequence[Landmark]) -> Landmark:
    """
    Calculate the approximate palm centroid.

    Args:
        landmarks: List of 21 hand landmarks

    Returns:
        Mean of the wrist and the index/middle/ring/pinky knuckles
    """
    count = len(PALM_INDICES)
    x_sum = sum(landmarks[i].x for i in PALM_INDICES)
    y_sum = sum(landmarks[i].y for i in PALM_INDICES)
    z_sum = sum(landmarks[i].z for i in PALM_INDICES)
    return Landmark(x_sum / count, y_sum / count, z_sum / count)


def tip_distance(landmarks: Sequence[Landmark], tip_index: int, palm: Landmark) -> float:
    """Planar distance from a fingertip to the palm centroid."""
    return distance_2d(landmarks[tip_index], palm)


def bounding_box(*hands: HandObservation) -> Tuple[float, float, float, float]:
    """
    Axis-aligned bounding box over every landmark of the given hands.

    Returns:
        (min_x, min_y, max_x, max_y)
    """
    points = np.array([(p.x, p.y) for hand in hands for p in hand.landmarks], dtype=float)
    min_x, min_y = points.min(axis=0)
    max_x, max_y = points.max(axis=0)
    return float(min_x), float(min_y), float(max_x), float(max_y)
