from __future__ import annotations

from typing import Dict, List


def load_class_names(metadata_path: str) -> Dict[int, str]:
    """
    Load class names from the lightweight `metadata.yaml` format exported next to a model:

        names:
          0: fire
          1: smoke

    Parsed line by line to avoid a PyYAML dependency.
    """

    names: Dict[int, str] = {}
    in_names = False

    with open(metadata_path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line == "names:":
                in_names = True
                continue
            if not in_names:
                continue

            if ":" not in line:
                continue
            left, right = line.split(":", 1)
            left = left.strip()
            right = right.strip().strip("'").strip('"')
            if not left.isdigit():
                continue
            names[int(left)] = right

    return names


def load_labels(labels_path: str) -> List[str]:
    """
    Load an ordered label table indexed by class id.

    Accepts either a plain `labels.txt` (one label per line) or the `names:`
    mapping format of `load_class_names`. Blank lines and `#` comments are skipped.
    """

    with open(labels_path, "r", encoding="utf-8") as f:
        lines = [raw.strip() for raw in f]
    lines = [line for line in lines if line and not line.startswith("#")]

    if "names:" in lines:
        names = load_class_names(labels_path)
        if not names:
            raise ValueError(f"No class names found in {labels_path}")
        if sorted(names) != list(range(len(names))):
            raise ValueError(f"Class ids in {labels_path} must be contiguous from 0, got {sorted(names)}")
        return [names[i] for i in range(len(names))]

    if not lines:
        raise ValueError(f"No labels found in {labels_path}")
    return lines
