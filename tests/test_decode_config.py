import json
import tempfile
import unittest
from pathlib import Path

from fire_kit.config import load_decode_config
from fire_kit.metadata import load_labels
from fire_kit.postprocess import DecodeConfig


class TestDecodeConfig(unittest.TestCase):
    def _tmpdir(self) -> Path:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        return Path(tmpdir.name)

    def _write_config(self, payload: object, name: str = "decode.json") -> Path:
        path = self._tmpdir() / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_defaults(self) -> None:
        cfg = DecodeConfig()
        self.assertEqual(cfg.objectness_threshold, 0.25)
        self.assertEqual(cfg.class_threshold, 0.25)
        self.assertEqual(cfg.labels, ("fire",))
        self.assertFalse(cfg.apply_nms)

    def test_list_labels_become_tuple(self) -> None:
        cfg = DecodeConfig(labels=["fire", "smoke"])  # type: ignore[arg-type]
        self.assertEqual(cfg.labels, ("fire", "smoke"))
        self.assertEqual(cfg.label_for(1), "smoke")
        self.assertEqual(cfg.label_for(2), "2")

    def test_invalid_values_rejected(self) -> None:
        for kwargs in (
            {"objectness_threshold": 1.5},
            {"class_threshold": -0.1},
            {"objectness_threshold": float("nan")},
            {"class_threshold": float("inf")},
            {"iou_threshold": float("nan")},
            {"labels": ()},
            {"labels": "fire"},
            {"labels": ("fire", "")},
            {"input_side": 0},
            {"input_side": True},
            {"max_detections": 0},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    DecodeConfig(**kwargs)  # type: ignore[arg-type]

    def test_load_ok(self) -> None:
        path = self._write_config(
            {
                "objectness_threshold": 0.3,
                "class_threshold": 0.4,
                "labels": ["fire", "smoke"],
                "input_side": 320,
                "apply_nms": True,
            }
        )
        cfg = load_decode_config(path)
        self.assertEqual(cfg.objectness_threshold, 0.3)
        self.assertEqual(cfg.class_threshold, 0.4)
        self.assertEqual(cfg.labels, ("fire", "smoke"))
        self.assertEqual(cfg.input_side, 320)
        self.assertTrue(cfg.apply_nms)
        self.assertEqual(cfg.iou_threshold, 0.45)

    def test_labels_file_relative_to_config(self) -> None:
        tmp = self._tmpdir()
        (tmp / "labels.txt").write_text("fire\n\n# comment\nsmoke\n", encoding="utf-8")
        path = tmp / "decode.json"
        path.write_text(json.dumps({"labels_file": "labels.txt"}), encoding="utf-8")
        cfg = load_decode_config(path)
        self.assertEqual(cfg.labels, ("fire", "smoke"))

    def test_unknown_keys_rejected(self) -> None:
        path = self._write_config({"objectness_threshold": 0.3, "extra": 1})
        with self.assertRaises(ValueError):
            load_decode_config(path)

    def test_wrong_types_rejected(self) -> None:
        for payload in (
            {"objectness_threshold": "0.3"},
            {"input_side": 640.5},
            {"apply_nms": 1},
            {"labels": "fire"},
            {"labels": ["fire"], "labels_file": "labels.txt"},
            [1, 2, 3],
        ):
            with self.subTest(payload=payload):
                path = self._write_config(payload)
                with self.assertRaises(ValueError):
                    load_decode_config(path)

    def test_invalid_json_and_missing_file(self) -> None:
        path = self._tmpdir() / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_decode_config(path)
        with self.assertRaises(FileNotFoundError):
            load_decode_config(path.parent / "missing.json")


class TestLoadLabels(unittest.TestCase):
    def test_names_mapping_format(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "metadata.yaml"
        path.write_text("task: detect\nnames:\n  0: fire\n  1: 'smoke'\n", encoding="utf-8")
        # "task: detect" precedes names:, so it is not a label file line
        self.assertEqual(load_labels(str(path)), ["fire", "smoke"])

    def test_empty_file_rejected(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "labels.txt"
        path.write_text("\n# nothing\n", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_labels(str(path))


if __name__ == "__main__":
    unittest.main()
