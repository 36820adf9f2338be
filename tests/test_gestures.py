"""
Test cases for the gesture classifiers with synthetic hand observations.
"""
import math
import random
import unittest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sculptnet.gestures import (
    CAMERA_ANGLES,
    COMPOSITION_PATH,
    COMPOSITION_PRESETS,
    LENS_PATH,
    LIGHTING_PRESETS,
    FrameCompositionGesture,
    PinchGesture,
    VerticalLightingGesture,
    WristRotationGesture,
    fov_to_lens,
    lens_to_fov,
)
from sculptnet.types import HandObservation

from synthetic_hands import box_hand, make_hand, open_hand, random_hand, shifted


def pinch_hand(d: float, dz: float = 0.0) -> HandObservation:
    """Hand with thumb and index tips exactly `d` apart along x."""
    return make_hand(overrides={4: (0.3, 0.5, 0.0), 8: (0.3 + d, 0.5, dz)})


class TestPinchGesture(unittest.TestCase):
    """Test pinch → lens mapping."""

    def setUp(self):
        self.gesture = PinchGesture()

    def test_narrow_pinch_is_telephoto(self):
        """Thumb (0.5, 0.5, 0) and index (0.53, 0.5, 0) give the narrowest lens."""
        hand = make_hand(overrides={4: (0.5, 0.5, 0.0), 8: (0.53, 0.5, 0.0)})

        update = self.gesture.update(hand)

        self.assertIsNotNone(update)
        self.assertEqual(update.path, LENS_PATH)
        self.assertEqual(update.value, "200mm telephoto")
        self.assertAlmostEqual(update.confidence, 0.94, places=6)

    def test_out_of_domain_returns_none(self):
        """Distances outside [0.02, 0.25] are not a pinch."""
        self.assertIsNone(self.gesture.update(pinch_hand(0.01)))
        self.assertIsNone(self.gesture.update(pinch_hand(0.3)))

    def test_domain_boundaries_are_accepted(self):
        """Both ends of the domain classify, to the narrowest and widest lens."""
        self.assertEqual(self.gesture.update(pinch_hand(0.02)).value, "200mm telephoto")
        self.assertEqual(self.gesture.update(pinch_hand(0.25)).value, "24mm ultra-wide")

    def test_bucketing_totality(self):
        """Every valid distance maps to a lens whose FOV lies in [35, 120]."""
        steps = 200
        for i in range(steps + 1):
            d = 0.02 + (0.25 - 0.02) * i / steps
            update = self.gesture.update(pinch_hand(d))
            self.assertIsNotNone(update, f"distance {d}")
            fov = lens_to_fov(update.value)
            self.assertGreaterEqual(fov, 35)
            self.assertLessEqual(fov, 120)

    def test_monotonic_in_distance(self):
        """A wider pinch never gives a narrower lens."""
        previous = None
        for i in range(101):
            d = 0.02 + (0.25 - 0.02) * i / 100
            fov = lens_to_fov(self.gesture.update(pinch_hand(d)).value)
            if previous is not None:
                self.assertGreaterEqual(fov, previous)
            previous = fov

    def test_depth_difference_lowers_confidence(self):
        """Fingertips on different depth planes are less convincing."""
        flat = self.gesture.update(pinch_hand(0.05))
        tilted = self.gesture.update(pinch_hand(0.05, dz=0.05))
        self.assertLess(tilted.confidence, flat.confidence)
        self.assertGreaterEqual(tilted.confidence, 0.0)
        self.assertLessEqual(flat.confidence, 1.0)

    def test_rejects_wrong_landmark_count(self):
        """Observations without 21 landmarks are rejected, not crashed on."""
        short = HandObservation.from_points([(0.5, 0.5, 0.0)] * 20)
        self.assertIsNone(self.gesture.update(short))
        self.assertIsNone(self.gesture.update(None))

    def test_lens_mapping(self):
        """FOV buckets and their representative values."""
        self.assertEqual(fov_to_lens(35), "200mm telephoto")
        self.assertEqual(fov_to_lens(50), "85mm portrait")
        self.assertEqual(fov_to_lens(70), "50mm standard")
        self.assertEqual(fov_to_lens(71), "35mm wide")
        self.assertEqual(fov_to_lens(120), "24mm ultra-wide")
        self.assertEqual(lens_to_fov("unknown lens"), 60)


class TestWristRotationGesture(unittest.TestCase):
    """Test wrist rotation → camera angle mapping."""

    def setUp(self):
        self.gesture = WristRotationGesture()

    def hand_at_angle(self, degrees: float) -> HandObservation:
        rad = math.radians(degrees)
        middle_base = (0.5 + 0.1 * math.cos(rad), 0.5 + 0.1 * math.sin(rad), 0.0)
        return make_hand(overrides={0: (0.5, 0.5, 0.0), 9: middle_base})

    def test_level_scenario(self):
        """Middle knuckle at 100 degrees from the wrist reads as 10 degrees: eye level."""
        update = self.gesture.update(self.hand_at_angle(100))
        self.assertEqual(update.value, CAMERA_ANGLES["eye_level"])
        self.assertAlmostEqual(update.confidence, abs(math.cos(math.radians(100))) + 0.5, places=6)

    def test_breakpoints(self):
        """Adjusted angles bucket into the four presets."""
        self.assertEqual(self.gesture.update(self.hand_at_angle(60)).value, CAMERA_ANGLES["low_dutch_tilt"])
        self.assertEqual(self.gesture.update(self.hand_at_angle(120)).value, CAMERA_ANGLES["high_angle"])
        self.assertEqual(self.gesture.update(self.hand_at_angle(150)).value, CAMERA_ANGLES["birds_eye_view"])

    def test_confidence_is_clamped(self):
        """Horizontal direction gives |cos| = 1, clamped to 1."""
        update = self.gesture.update(self.hand_at_angle(180))
        self.assertEqual(update.confidence, 1.0)


class TestVerticalLightingGesture(unittest.TestCase):
    """Test vertical position → lighting mapping with smoothing."""

    def setUp(self):
        self.gesture = VerticalLightingGesture()

    def hand_with_wrist_y(self, y: float) -> HandObservation:
        return shifted(open_hand(), dy=y - 0.7)

    def test_first_sample_has_neutral_confidence(self):
        """A single sample is not enough to judge stability."""
        update = self.gesture.update(self.hand_with_wrist_y(0.2))
        self.assertEqual(update.value, LIGHTING_PRESETS["night"])
        self.assertEqual(update.confidence, 0.5)

    def test_stable_hand_has_full_confidence(self):
        for _ in range(5):
            update = self.gesture.update(self.hand_with_wrist_y(0.8))
        self.assertEqual(update.value, LIGHTING_PRESETS["studio"])
        self.assertAlmostEqual(update.confidence, 1.0)

    def test_moving_average_and_confidence_floor(self):
        """A jump is smoothed by the window and unstable input is floored at 0.3."""
        for _ in range(4):
            self.gesture.update(self.hand_with_wrist_y(0.2))
        update = self.gesture.update(self.hand_with_wrist_y(0.9))
        # mean of (0.2, 0.2, 0.2, 0.2, 0.9) = 0.34
        self.assertEqual(update.value, LIGHTING_PRESETS["golden_hour"])
        self.assertEqual(update.confidence, 0.3)

    def test_window_holds_five_samples(self):
        for _ in range(5):
            self.gesture.update(self.hand_with_wrist_y(0.2))
        for _ in range(5):
            update = self.gesture.update(self.hand_with_wrist_y(0.6))
        self.assertEqual(len(self.gesture.wrist_y_history), 5)
        self.assertEqual(update.value, LIGHTING_PRESETS["volumetric"])

    def test_instances_do_not_share_history(self):
        other = VerticalLightingGesture()
        self.gesture.update(self.hand_with_wrist_y(0.2))
        self.assertEqual(len(other.wrist_y_history), 0)

    def test_reset_clears_history(self):
        self.gesture.update(self.hand_with_wrist_y(0.2))
        self.gesture.reset()
        self.assertEqual(len(self.gesture.wrist_y_history), 0)


class TestFrameCompositionGesture(unittest.TestCase):
    """Test two-hand frame → composition mapping."""

    def setUp(self):
        self.gesture = FrameCompositionGesture()

    def test_panoramic(self):
        update = self.gesture.update(box_hand(0.1, 0.4, 0.3, 0.6), box_hand(0.7, 0.4, 0.9, 0.6))
        self.assertEqual(update.path, COMPOSITION_PATH)
        self.assertEqual(update.value, COMPOSITION_PRESETS["panoramic"])
        self.assertEqual(update.confidence, 1.0)

    def test_centered(self):
        update = self.gesture.update(box_hand(0.35, 0.35, 0.5, 0.65), box_hand(0.5, 0.35, 0.65, 0.65))
        self.assertEqual(update.value, COMPOSITION_PRESETS["centered"])
        self.assertAlmostEqual(update.confidence, 1.0)

    def test_rule_of_thirds(self):
        update = self.gesture.update(box_hand(0.2, 0.2, 0.3, 0.45), box_hand(0.3, 0.2, 0.45, 0.45))
        self.assertEqual(update.value, COMPOSITION_PRESETS["rule_of_thirds"])
        self.assertAlmostEqual(update.confidence, 1 - 3 * (1 / 3 - 0.325), places=6)

    def test_flat_frame_is_panoramic(self):
        """Zero height with non-zero width is treated as infinitely wide."""
        update = self.gesture.update(box_hand(0.1, 0.5, 0.3, 0.5), box_hand(0.6, 0.5, 0.8, 0.5))
        self.assertEqual(update.value, COMPOSITION_PRESETS["panoramic"])

    def test_symmetric_under_hand_order(self):
        rng = random.Random(42)
        for _ in range(200):
            a = random_hand(rng, side="Left")
            b = random_hand(rng, side="Right")
            self.assertEqual(self.gesture.update(a, b), self.gesture.update(b, a))

    def test_requires_two_valid_hands(self):
        short = HandObservation.from_points([(0.5, 0.5, 0.0)] * 5)
        self.assertIsNone(self.gesture.update(open_hand(), short))


if __name__ == '__main__':
    unittest.main()
