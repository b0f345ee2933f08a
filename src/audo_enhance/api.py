"""FastAPI interface for Audo_Enhance."""

from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from .application.job_service import EnhancementJobService
from .audio_contract import OUTPUT_FILENAME_TEMPLATE, OUTPUT_MEDIA_TYPE
from .interfaces.api_handlers import get_job_service, submit_enhancement, submit_feedback
from .request_validation import RequestValidationError

DEFAULT_EVENTS_LIMIT = 50
MAX_EVENTS_LIMIT = 500

app = FastAPI(title="Audo_Enhance API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


def _not_found(job_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "job_not_found", "message": f"Job '{job_id}' not found."})


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""

    return {"status": "ok"}


@app.post("/enhance")
def enhance(
    payload: dict[str, Any] = Body(..., description="Enhancement request"),
    service: EnhancementJobService = Depends(get_job_service),
) -> dict[str, str]:
    """Queue an enhancement job and return its ID immediately."""

    try:
        job_id = submit_enhancement(service, payload)
    except RequestValidationError as error:
        raise HTTPException(status_code=400, detail=error.as_dict()) from error
    return {"jobId": job_id}


@app.get("/jobs/{job_id}")
def get_job(job_id: str, service: EnhancementJobService = Depends(get_job_service)) -> dict[str, Any]:
    snapshot = service.snapshot(job_id)
    if snapshot is None:
        raise _not_found(job_id)
    return snapshot.to_dict()


@app.get("/download/{job_id}")
def download(job_id: str, service: EnhancementJobService = Depends(get_job_service)) -> FileResponse:
    """Stream the rendered WAV for a finished job."""

    output_path = service.output_file(job_id)
    if output_path is None:
        raise _not_found(job_id)
    return FileResponse(
        output_path,
        media_type=OUTPUT_MEDIA_TYPE,
        filename=OUTPUT_FILENAME_TEMPLATE.format(job_id=job_id),
    )


@app.post("/feedback")
def feedback(
    payload: dict[str, Any] = Body(..., description="Listener feedback"),
    service: EnhancementJobService = Depends(get_job_service),
) -> dict[str, Any]:
    try:
        event = submit_feedback(service, payload)
    except RequestValidationError as error:
        raise HTTPException(status_code=400, detail=error.as_dict()) from error
    return {"ok": True, "eventId": event.event_id}


@app.get("/events")
def recent_events(
    limit: int = Query(DEFAULT_EVENTS_LIMIT, ge=1, le=MAX_EVENTS_LIMIT, description="Newest events to return."),
    service: EnhancementJobService = Depends(get_job_service),
) -> dict[str, Any]:
    """Most recent classification events, oldest first."""

    return {"events": [event.to_dict() for event in service.recent_events(limit)]}
