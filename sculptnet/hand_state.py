"""
Hand posture tracking and the fist-to-open generation trigger.
"""
import logging

from .landmarks import FINGERTIPS, is_valid, palm_center, tip_distance
from .types import HandObservation, HandPosture

logger = logging.getLogger(__name__)

CLOSED_THRESHOLD = 0.15  # fingertip closer than this to the palm counts as curled
OPEN_THRESHOLD = 0.25  # fingertip farther than this counts as extended
MIN_FINGERS = 4


def classify_posture(hand: HandObservation) -> HandPosture:
    """
    Classify a hand as closed, open or ambiguous.

    Args:
        hand: Valid 21-point hand observation

    Returns:
        HandPosture for this frame only
    """
    palm = palm_center(hand.landmarks)
    closed = 0
    opened = 0
    for tip in FINGERTIPS:
        d = tip_distance(hand.landmarks, tip, palm)
        if d < CLOSED_THRESHOLD:
            closed += 1
        elif d > OPEN_THRESHOLD:
            opened += 1

    if closed >= MIN_FINGERS:
        return HandPosture.CLOSED
    if opened >= MIN_FINGERS:
        return HandPosture.OPEN
    return HandPosture.AMBIGUOUS


class HandStateMachine:
    """
    Remembers the hand posture across frames and detects the closed → open edge.

    The trigger is edge-triggered: holding an open hand fires nothing, and
    an open hand that was not preceded by a fist fires nothing.
    """

    def __init__(self):
        self.posture = HandPosture.AMBIGUOUS

    def detect_trigger(self, hand: HandObservation) -> bool:
        """
        Update the remembered posture and report whether generation should fire.

        Args:
            hand: Current hand observation

        Returns:
            True only on a closed → open transition
        """
        if not is_valid(hand):
            return False

        current = classify_posture(hand)
        fired = self.posture is HandPosture.CLOSED and current is HandPosture.OPEN
        if current is not self.posture:
            logger.debug("Hand posture %s -> %s", self.posture.value, current.value)
        self.posture = current
        return fired

    def reset(self) -> None:
        """Forget any observed posture."""
        self.posture = HandPosture.AMBIGUOUS
