"""
Hand landmark detection using MediaPipe (observation source for the demo).
"""
import cv2
import mediapipe as mp
import numpy as np
from typing import List

from .types import HandObservation


class HandsTracker:
    """Hand landmark tracker using MediaPipe Hands."""

    def __init__(self, max_num_hands: int = 2, min_detection_conf: float = 0.5, min_tracking_conf: float = 0.5):
        """
        Initialize the hands tracker.

        Args:
            max_num_hands: Maximum number of hands to detect
            min_detection_conf: Minimum confidence for hand detection
            min_tracking_conf: Minimum confidence for hand tracking
        """
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=max_num_hands,
            min_detection_confidence=min_detection_conf,
            min_tracking_confidence=min_tracking_conf
        )

    def process(self, frame_bgr: np.ndarray) -> List[HandObservation]:
        """
        Process a frame and return every detected hand.

        Args:
            frame_bgr: Input frame in BGR format

        Returns:
            One HandObservation (21 normalized x, y, z landmarks) per hand; empty if none
        """
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self.hands.process(frame_rgb)

        if not results.multi_hand_landmarks:
            return []

        observations = []
        handedness = results.multi_handedness or []
        for i, hand_landmarks in enumerate(results.multi_hand_landmarks):
            side = "Right"
            if i < len(handedness):
                side = handedness[i].classification[0].label
            observations.append(HandObservation.from_points(
                ((lm.x, lm.y, lm.z) for lm in hand_landmarks.landmark),
                side=side
            ))
        return observations

    def draw_landmarks(self, frame: np.ndarray, hands: List[HandObservation]) -> np.ndarray:
        """
        Draw hand landmarks on the frame.

        Args:
            frame: Input frame
            hands: Observations returned by `process`

        Returns:
            Frame with landmarks drawn
        """
        height, width = frame.shape[:2]

        for hand in hands:
            for i, point in enumerate(hand.landmarks):
                px = int(point.x * width)
                py = int(point.y * height)
                cv2.circle(frame, (px, py), 3, (0, 255, 0), -1)
                cv2.putText(frame, str(i), (px + 5, py - 5), cv2.FONT_HERSHEY_SIMPLEX, 0.3, (255, 255, 255), 1)

        return frame

    def close(self) -> None:
        self.hands.close()
