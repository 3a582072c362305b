import unittest

from fire_kit.alerts import count_label, detection_summary, has_fire, has_label, has_smoke
from fire_kit.types import BoundingBox, DetectionResult


def _det(label: str, confidence: float) -> DetectionResult:
    return DetectionResult(label=label, confidence=confidence, bounding_box=BoundingBox(0.0, 0.0, 10.0, 10.0))


class TestFireAlerts(unittest.TestCase):
    def test_has_fire_respects_floor(self) -> None:
        self.assertFalse(has_fire([_det("fire", 0.69)], 0.7))
        self.assertTrue(has_fire([_det("fire", 0.71)], 0.7))

    def test_floor_is_strict(self) -> None:
        self.assertFalse(has_fire([_det("fire", 0.25)], 0.25))
        self.assertTrue(has_fire([_det("fire", 0.26)], 0.25))

    def test_other_labels_do_not_trigger_fire(self) -> None:
        results = [_det("smoke", 0.99), _det("7", 0.99)]
        self.assertFalse(has_fire(results, 0.25))
        self.assertTrue(has_smoke(results, 0.7))
        self.assertTrue(has_label(results, "7", 0.5))

    def test_empty_results(self) -> None:
        self.assertFalse(has_fire([], 0.0))
        self.assertEqual(detection_summary([]), "Fire Detections: 0")

    def test_summary_counts_fire_only(self) -> None:
        results = [_det("fire", 0.3), _det("smoke", 0.9), _det("fire", 0.8)]
        self.assertEqual(count_label(results, "fire"), 2)
        self.assertEqual(detection_summary(results), "Fire Detections: 2")


if __name__ == "__main__":
    unittest.main()
