"""FastAPI service driving the guided text pipeline.

This service exposes:

- ``GET /health``            – lightweight health check
- ``GET /status``            – current pipeline state and recent status lines
- ``POST /files/{role}``     – select the training/testing/validation CSV
- ``POST /stages/{stage}``   – run parse, inspect, preprocess, embed,
  create_model, train or evaluate
- ``POST /predict``          – classify one text with the trained model
- ``POST /reset``            – abandon the run and return to file selection
- ``GET /metrics``           – Prometheus metrics endpoint

Stages invoked out of order answer 409; a stage that ran and failed answers
422 and can be retried once the input is fixed.
"""

from __future__ import annotations

import tempfile
import time
from pathlib import Path
from typing import Any, Literal

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.encoders import jsonable_encoder
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from pydantic import BaseModel
from starlette.responses import Response

from guided_text_pipeline.entity.artifact_entity import DatasetFile, DatasetRole
from guided_text_pipeline.exception import StageOrderError
from guided_text_pipeline.logging.logger import logger
from guided_text_pipeline.pipeline.controller import PipelineController
from guided_text_pipeline.pipeline.reporting import RecordingReporter
from guided_text_pipeline.pipeline.state import StageResult


app = FastAPI(title="Guided Text Pipeline API", version="0.1.0")

StageName = Literal["parse", "inspect", "preprocess", "embed", "create_model", "train", "evaluate"]


class PredictRequest(BaseModel):
	"""Request schema for /predict endpoint."""

	text: str


class StageResponse(BaseModel):
	"""Response schema for every stage endpoint."""

	step: str
	success: bool
	message: str
	severity: str
	payload: Any = None


# ----------------------------------------------------------------------------
# Prometheus Metrics
# ----------------------------------------------------------------------------

REQUEST_COUNT = Counter(
	"guided_pipeline_requests_total",
	"Total number of pipeline requests",
	["endpoint", "http_status"],
)

REQUEST_LATENCY = Histogram(
	"guided_pipeline_request_latency_seconds",
	"Latency of pipeline requests in seconds",
	["endpoint"],
)


_controller: PipelineController | None = None
_upload_dir: Path | None = None


def get_controller() -> PipelineController:
	"""Lazily initialize and cache the pipeline controller."""

	global _controller
	if _controller is None:
		logger.info("Initialising PipelineController inside FastAPI app...")
		_controller = PipelineController(reporter=RecordingReporter())
	return _controller


def get_upload_dir() -> Path:
	"""Directory holding the uploaded dataset files for this process."""

	global _upload_dir
	if _upload_dir is None:
		_upload_dir = Path(tempfile.mkdtemp(prefix="guided_pipeline_"))
	return _upload_dir


def _to_response(result: StageResult, endpoint: str) -> StageResponse:
	if not result.success:
		REQUEST_COUNT.labels(endpoint=endpoint, http_status="422").inc()
		raise HTTPException(status_code=422, detail=result.message)

	REQUEST_COUNT.labels(endpoint=endpoint, http_status="200").inc()
	return StageResponse(
		step=result.step.value,
		success=result.success,
		message=result.message,
		severity=result.severity.value,
		payload=jsonable_encoder(result.payload),
	)


@app.get("/health")
async def health() -> dict:
	"""Basic health check used by liveness/readiness probes."""

	return {"status": "ok"}


@app.get("/status")
async def status(controller: PipelineController = Depends(get_controller)) -> dict:
	"""Current state, failure overlay and the latest status lines."""

	snapshot = controller.status()
	reporter = controller.reporter
	if isinstance(reporter, RecordingReporter):
		snapshot["messages"] = [
			{"step": entry.step, "message": entry.message, "severity": entry.severity.value}
			for entry in reporter.entries[-20:]
		]
	return jsonable_encoder(snapshot)


@app.post("/files/{role}", response_model=StageResponse)
async def select_file(
	role: DatasetRole,
	file: UploadFile = File(...),
	controller: PipelineController = Depends(get_controller),
	upload_dir: Path = Depends(get_upload_dir),
) -> StageResponse:
	"""Select the dataset file for one role; only its name is validated here."""

	endpoint = "/files"
	start_time = time.time()
	try:
		content = await file.read()
		target = upload_dir / f"{role.value}.csv"
		target.write_bytes(content)
		dataset_file = DatasetFile(name=file.filename or "", path=target, size=len(content))
		return _to_response(await controller.select_file(role, dataset_file), endpoint)
	finally:
		REQUEST_LATENCY.labels(endpoint=endpoint).observe(time.time() - start_time)


@app.post("/stages/{stage}", response_model=StageResponse)
async def run_stage(
	stage: StageName,
	controller: PipelineController = Depends(get_controller),
) -> StageResponse:
	"""Run one pipeline stage."""

	endpoint = f"/stages/{stage}"
	start_time = time.time()
	try:
		result = await getattr(controller, stage)()
		return _to_response(result, endpoint)
	except StageOrderError as exc:
		REQUEST_COUNT.labels(endpoint=endpoint, http_status="409").inc()
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	finally:
		REQUEST_LATENCY.labels(endpoint=endpoint).observe(time.time() - start_time)


@app.post("/predict", response_model=StageResponse)
async def predict(
	payload: PredictRequest,
	controller: PipelineController = Depends(get_controller),
) -> StageResponse:
	"""Run classification on a single input text."""

	endpoint = "/predict"
	start_time = time.time()
	try:
		return _to_response(await controller.predict(payload.text), endpoint)
	except StageOrderError as exc:
		REQUEST_COUNT.labels(endpoint=endpoint, http_status="409").inc()
		raise HTTPException(status_code=409, detail=str(exc)) from exc
	finally:
		REQUEST_LATENCY.labels(endpoint=endpoint).observe(time.time() - start_time)


@app.post("/reset")
async def reset(controller: PipelineController = Depends(get_controller)) -> dict:
	"""Discard every artifact and return to file selection."""

	await controller.reset()
	return {"state": controller.run.state.name}


@app.get("/metrics")
async def metrics() -> Response:
	"""Expose Prometheus metrics for scraping by Prometheus server."""

	data = generate_latest()
	return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.get("/")
async def root() -> dict:
	"""Simple index endpoint for quick manual checks."""

	return {"message": "Guided Text Pipeline API is running"}


if __name__ == "__main__":  # pragma: no cover
	import uvicorn

	uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True)
