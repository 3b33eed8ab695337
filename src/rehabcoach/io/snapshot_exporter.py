# src/rehabcoach/io/snapshot_exporter.py
from __future__ import annotations
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..data_models import Landmark, RehabMetrics, SnapshotMetadata
from ..exceptions import ExportError
from ..ui.overlays import compose_snapshot
from ..utils.logging_config import get_logger
from .json_writer import write_json

logger = get_logger(__name__)

# Returns the current video frame (BGR) and the landmarks drawn on it, or None before the first frame.
FrameSource = Callable[[], Optional[Tuple[np.ndarray, Sequence[Landmark]]]]


def iso_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SnapshotArtifacts:
    metadata_path: str
    image_path: Optional[str] = None


class SnapshotExporter:
    """
    Capture handler writing `rehab_data_<ts>.png` plus a JSON sidecar.

    Without a frame source only the sidecar is written. With one, nothing
    is written until it can supply a frame.
    """

    def __init__(
        self,
        out_dir: str,
        frame_source: Optional[FrameSource] = None,
        now: Callable[[], datetime] = _utc_now,
    ):
        self.out_dir = out_dir
        self.frame_source = frame_source
        self._now = now
        self.exported: List[SnapshotArtifacts] = []

    def __call__(self, metrics: RehabMetrics) -> Optional[SnapshotArtifacts]:
        return self.export(metrics)

    def export(self, metrics: RehabMetrics) -> Optional[SnapshotArtifacts]:
        image = None
        if self.frame_source is not None:
            captured = self.frame_source()
            if captured is None:
                logger.debug("[SnapshotExporter] No video frame available; capture skipped")
                return None
            frame_bgr, landmarks = captured
            image = compose_snapshot(frame_bgr, landmarks, metrics.feedback)

        stamp = iso_timestamp(self._now())
        base = os.path.join(self.out_dir, "rehab_data_" + stamp.replace(":", "-").replace(".", "-"))
        os.makedirs(self.out_dir, exist_ok=True)

        image_path = None
        if image is not None:
            image_path = base + ".png"
            if not cv2.imwrite(image_path, image):
                raise ExportError(f"Could not encode snapshot image {image_path}")

        sidecar = SnapshotMetadata(timestamp=stamp, metrics=metrics)
        metadata_path = write_json(base + ".json", sidecar.model_dump(mode="json", by_alias=True))

        artifacts = SnapshotArtifacts(metadata_path=metadata_path, image_path=image_path)
        self.exported.append(artifacts)
        logger.info(f"[SnapshotExporter] Saved {metadata_path}")
        return artifacts
