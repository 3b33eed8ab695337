# src/rehabcoach/io/json_writer.py
import json
import os
from typing import Any

from ..exceptions import ExportError


def write_json(path: str, data: Any) -> str:
    """Pretty-print `data` to `path` (UTF-8), creating the parent folder. Returns the path."""
    parent = os.path.dirname(path)
    try:
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}") from e
    return path
