# app/main.py

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from rehabcoach.activities.activity_defs import EXERCISE_LIBRARY, resolve_exercise
from rehabcoach.config import settings
from rehabcoach.data_models import (
    AnnotationRequest, CalibrateRequest, ExerciseType, PoseFrameRequest, RehabMetrics, StatusResponse,
)
from rehabcoach.engine import MetricsEngine
from rehabcoach.exceptions import UnknownExerciseError
from rehabcoach.io.annotation_dataset import AnnotationDataset
from rehabcoach.io.snapshot_exporter import SnapshotExporter
from rehabcoach.utils.logging_config import get_logger

logger = get_logger("rehabcoach.app", settings.log_level)

# --- APP SETUP ---
app = FastAPI(title="RehabCoach")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- GLOBAL STATE ---
# One isolated engine per exercise page; created on first use.
EXPORT_DIR: str = settings.export_dir
engines: Dict[ExerciseType, MetricsEngine] = {}
annotations = AnnotationDataset()
executor = ThreadPoolExecutor(max_workers=2)


# --- HELPER FUNCTIONS ---
async def run_in_executor_async(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, func, *args)


def get_engine_for(exercise: str) -> MetricsEngine:
    key = resolve_exercise(exercise)
    if key not in engines:
        engines[key] = MetricsEngine(key, capture_handler=SnapshotExporter(EXPORT_DIR))
        logger.info(f"[App] Created engine for {key.value}")
    return engines[key]


def reset_state() -> None:
    engines.clear()
    annotations.clear()


def dump_metrics(metrics: RehabMetrics) -> Dict[str, Any]:
    return metrics.model_dump(mode="json", by_alias=True)


@app.exception_handler(UnknownExerciseError)
async def unknown_exercise_handler(request: Request, exc: UnknownExerciseError):
    return JSONResponse(status_code=404, content={"status": "error", "message": str(exc)})


# --- ENDPOINTS ---
@app.get("/exercises")
async def list_exercises():
    return [
        {"exercise": key.value, "label": entry["label"], "tips": entry["tips"]}
        for key, entry in EXERCISE_LIBRARY.items()
    ]


@app.post("/exercise/{exercise}/frame")
async def push_frame(exercise: str, req: PoseFrameRequest):
    engine = get_engine_for(exercise)
    metrics = engine.process_frame(req.landmarks)
    if metrics is None:
        return {"accepted": False}
    return {"accepted": True, "metrics": dump_metrics(metrics)}


@app.get("/exercise/{exercise}/metrics")
async def get_metrics(exercise: str):
    return dump_metrics(get_engine_for(exercise).metrics)


@app.post("/exercise/{exercise}/session/start")
async def start_session(exercise: str):
    return dump_metrics(get_engine_for(exercise).start_session())


@app.post("/exercise/{exercise}/session/end")
async def end_session(exercise: str):
    return dump_metrics(get_engine_for(exercise).end_session())


@app.get("/exercise/{exercise}/session/report")
async def session_report(exercise: str):
    return get_engine_for(exercise).session_report().model_dump(mode="json", by_alias=True)


@app.get("/exercise/{exercise}/calibration")
async def get_calibration(exercise: str):
    cal = get_engine_for(exercise).calibration
    return {"calibration": cal.model_dump(by_alias=True) if cal else None}


@app.post("/exercise/{exercise}/calibrate")
async def calibrate(exercise: str, req: CalibrateRequest):
    cal = get_engine_for(exercise).calibrate(req.kind)
    return {"calibration": cal.model_dump(by_alias=True)}


@app.post("/exercise/{exercise}/calibration/reset", response_model=StatusResponse)
async def reset_calibration(exercise: str):
    get_engine_for(exercise).reset_calibration()
    return StatusResponse(status="success", message="Calibration cleared")


@app.post("/exercise/{exercise}/capture")
async def capture(exercise: str):
    # sidecar I/O runs on the worker pool, away from the frame path
    engine = get_engine_for(exercise)
    captured = await run_in_executor_async(engine.capture_snapshot)
    return {"captured": captured}


@app.websocket("/exercise/{exercise}/stream")
async def ws_stream(ws: WebSocket, exercise: str):
    try:
        engine = get_engine_for(exercise)
    except UnknownExerciseError:
        await ws.close(code=1008)
        return

    await ws.accept()
    try:
        while True:
            text = await ws.receive_text()
            try:
                frame = PoseFrameRequest.model_validate_json(text)
            except ValidationError as e:
                await ws.send_json({"error": "invalid frame", "detail": e.errors(include_url=False)})
                continue
            metrics = engine.process_frame(frame.landmarks)
            if metrics is not None:
                await ws.send_json(dump_metrics(metrics))
    except WebSocketDisconnect:
        logger.info(f"[App] Stream for {engine.exercise.value} disconnected")


@app.get("/annotations")
async def list_annotations():
    return annotations.to_json()


@app.post("/annotations")
async def add_annotation(req: AnnotationRequest):
    record = annotations.add_sample(req.landmarks, req.lumbar_l3)
    return record.model_dump(mode="json")


@app.post("/annotations/export")
async def export_annotations():
    path = await run_in_executor_async(annotations.export, EXPORT_DIR)
    return {"status": "success", "path": path, "count": len(annotations)}


@app.on_event("shutdown")
async def shutdown():
    executor.shutdown(wait=False)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
