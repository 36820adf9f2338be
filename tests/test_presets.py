"""
Test cases for preset sign pattern detection and preset persistence.
"""
import tempfile
import unittest
import sys
from pathlib import Path
from unittest import mock

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sculptnet.presets import (
    DEFAULT_PRESETS,
    MIN_CONFIDENCE,
    PresetConfig,
    PresetDetector,
    load_presets,
    save_presets,
)
from sculptnet.types import HandObservation

from synthetic_hands import CURLED, EXTENDED, fist, make_hand, open_hand


def peace_hand() -> HandObservation:
    return make_hand(index=EXTENDED, middle=EXTENDED, ring=CURLED, pinky=CURLED)


def rock_hand() -> HandObservation:
    return make_hand(index=EXTENDED, middle=CURLED, ring=CURLED, pinky=EXTENDED)


def thumbs_up_hand() -> HandObservation:
    return make_hand(index=CURLED, middle=CURLED, ring=CURLED, pinky=CURLED, thumb=(0.40, 0.45, 0.0))


class TestPresetDetection(unittest.TestCase):
    """Test pattern detection on synthetic hands."""

    def setUp(self):
        self.detector = PresetDetector()

    def test_peace(self):
        match = self.detector.detect(peace_hand())
        self.assertIsNotNone(match)
        self.assertEqual(match.type, "peace")
        self.assertAlmostEqual(match.confidence, 0.75)

    def test_rock(self):
        match = self.detector.detect(rock_hand())
        self.assertEqual(match.type, "rock")
        self.assertAlmostEqual(match.confidence, 0.75)

    def test_thumbs_up(self):
        match = self.detector.detect(thumbs_up_hand())
        self.assertEqual(match.type, "thumbs_up")
        self.assertAlmostEqual(match.confidence, 0.75)

    def test_fist_without_raised_thumb_is_no_match(self):
        self.assertIsNone(self.detector.detect(fist()))

    def test_open_hand_is_no_match(self):
        self.assertIsNone(self.detector.detect(open_hand()))

    def test_invalid_hand_is_no_match(self):
        short = HandObservation.from_points([(0.5, 0.5, 0.0)] * 10)
        self.assertIsNone(self.detector.detect(short))

    def test_priority_beats_confidence(self):
        """An accepted earlier pattern wins over a higher-scoring later one."""
        with mock.patch.object(self.detector, "_peace_confidence", return_value=0.61), \
                mock.patch.object(self.detector, "_rock_confidence", return_value=0.99):
            match = self.detector.detect(open_hand())
        self.assertEqual(match.type, "peace")
        self.assertEqual(match.confidence, 0.61)

    def test_threshold_is_inclusive(self):
        with mock.patch.object(self.detector, "_peace_confidence", return_value=MIN_CONFIDENCE):
            self.assertEqual(self.detector.detect(open_hand()).type, "peace")

    def test_below_threshold_is_skipped(self):
        with mock.patch.object(self.detector, "_peace_confidence", return_value=0.59), \
                mock.patch.object(self.detector, "_thumbs_up_confidence", return_value=0.59), \
                mock.patch.object(self.detector, "_rock_confidence", return_value=0.7):
            match = self.detector.detect(open_hand())
        self.assertEqual(match.type, "rock")

    def test_to_updates_covers_bundle(self):
        match = self.detector.detect(peace_hand())
        updates = match.to_updates()

        self.assertEqual(
            {u.path: u.value for u in updates},
            DEFAULT_PRESETS["peace"].parameters,
        )
        self.assertTrue(all(u.confidence == match.confidence for u in updates))


class TestPresetCustomization(unittest.TestCase):
    """Test replacing, restoring and persisting preset bundles."""

    def setUp(self):
        self.detector = PresetDetector()
        self.custom = PresetConfig(
            name="Noir",
            description="Black and white",
            parameters={"aesthetics.color_scheme": "black and white"},
        )

    def test_update_preset(self):
        self.detector.update_preset("peace", self.custom)

        match = self.detector.detect(peace_hand())

        self.assertEqual(match.preset.name, "Noir")
        self.assertEqual(match.to_updates()[0].value, "black and white")

    def test_update_unknown_preset_raises(self):
        with self.assertRaises(KeyError):
            self.detector.update_preset("wave", self.custom)

    def test_reset_restores_defaults(self):
        self.detector.update_preset("peace", self.custom)
        self.detector.reset_presets()
        self.assertEqual(self.detector.get_preset("peace"), DEFAULT_PRESETS["peace"])

    def test_custom_presets_do_not_leak_between_detectors(self):
        self.detector.update_preset("rock", self.custom)
        self.assertEqual(PresetDetector().get_preset("rock"), DEFAULT_PRESETS["rock"])

    def test_constructor_accepts_custom_presets(self):
        detector = PresetDetector(custom_presets={"thumbs_up": self.custom})
        self.assertEqual(detector.get_preset("thumbs_up").name, "Noir")
        self.assertEqual(detector.get_preset("peace"), DEFAULT_PRESETS["peace"])

    def test_save_and_load(self):
        self.detector.update_preset("rock", self.custom)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "presets.yaml"

            self.assertTrue(save_presets(self.detector.all_presets(), path))
            loaded = load_presets(path)

        self.assertEqual(loaded["rock"], self.custom)
        self.assertEqual(loaded["peace"], DEFAULT_PRESETS["peace"])

    def test_load_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(load_presets(Path(tmp) / "nope.yaml"))

    def test_load_malformed_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "presets.yaml"
            path.write_text("peace: [unclosed\n")
            self.assertIsNone(load_presets(path))

    def test_save_to_missing_directory_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing" / "presets.yaml"
            with self.assertLogs("sculptnet.presets", level="ERROR"):
                self.assertFalse(save_presets(DEFAULT_PRESETS, path))


if __name__ == '__main__':
    unittest.main()
