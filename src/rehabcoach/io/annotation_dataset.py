# src/rehabcoach/io/annotation_dataset.py
from __future__ import annotations
import os
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..data_models import AnnotationRecord, LabelPoint, LandmarkLike, ManualLabels, to_landmarks
from ..utils.logging_config import get_logger
from .json_writer import write_json
from .snapshot_exporter import iso_timestamp

logger = get_logger(__name__)

PointLike = Union[LabelPoint, Tuple[float, float]]


class AnnotationDataset:
    """
    Expert-labelled frames: the pose landmarks of a frozen frame plus a
    manually clicked lumbar (L3) point, both in normalized image units.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self.records: List[AnnotationRecord] = []
        self._last_id = 0

    def __len__(self) -> int:
        return len(self.records)

    def add_sample(self, landmarks: Sequence[LandmarkLike], lumbar_l3: PointLike) -> AnnotationRecord:
        now = self._clock()
        # ids are epoch milliseconds, bumped to stay unique within a burst
        record_id = max(int(now * 1000), self._last_id + 1)
        self._last_id = record_id

        point = lumbar_l3 if isinstance(lumbar_l3, LabelPoint) else LabelPoint(x=lumbar_l3[0], y=lumbar_l3[1])
        record = AnnotationRecord(
            id=record_id,
            timestamp=iso_timestamp(datetime.fromtimestamp(now, tz=timezone.utc)),
            landmarks=to_landmarks(landmarks),
            manual_labels=ManualLabels(lumbar_l3=point),
        )
        self.records.append(record)
        return record

    def clear(self) -> None:
        self.records.clear()

    def to_json(self) -> list:
        return [r.model_dump(mode="json") for r in self.records]

    def export(self, out_dir: str, filename: Optional[str] = None) -> str:
        name = filename or f"lumbar_dataset_{int(self._clock() * 1000)}.json"
        path = write_json(os.path.join(out_dir, name), self.to_json())
        logger.info(f"[AnnotationDataset] Exported {len(self.records)} samples to {path}")
        return path
