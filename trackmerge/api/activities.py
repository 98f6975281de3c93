"""Activity parse, merge and compare endpoints.

Stateless: every request builds its own workspace from the uploaded files.
"""

from __future__ import annotations

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response
from loguru import logger

from trackmerge.analysis.smoothing import check_window_size
from trackmerge.config.settings import settings
from trackmerge.core.errors import ActivityParseError, ComparisonTooLongError, SlotNotLoadedError
from trackmerge.export.gpx_builder import GPX_MIME_TYPE, build_gpx
from trackmerge.ingestion.file_parser import parse_activity_text
from trackmerge.models.activity import Activity
from trackmerge.utils.formatting import parse_pace_range
from trackmerge.workspace.slots import ComparisonWorkspace, SlotName

router = APIRouter(prefix="/activities", tags=["activities"])

ALLOWED_EXTENSIONS = {".gpx", ".tcx"}


def _read_upload(file: UploadFile) -> tuple[str, str]:
    """Validate an upload and decode it to text.

    Returns:
        Tuple of (text, file name)

    Raises:
        HTTPException: 400 for a missing name, bad extension, empty or undecodable file
        HTTPException: 413 if the file is too large
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No filename provided",
        )

    if not any(file.filename.lower().endswith(ext) for ext in ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )

    try:
        file_bytes = file.file.read()
    except OSError as e:
        logger.error(f"[UPLOAD] Failed to read file: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to read file: {e!s}",
        ) from e

    if len(file_bytes) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.max_upload_bytes / (1024 * 1024):.0f}MB",
        )

    if len(file_bytes) == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is empty",
        )

    try:
        return file_bytes.decode("utf-8-sig"), file.filename
    except UnicodeDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File is not valid UTF-8 text",
        ) from e


def _parse_error_detail(error: ActivityParseError) -> dict[str, str | None]:
    return {"code": error.code, "message": error.message, "file_name": error.file_name}


@router.post("/parse", response_model=Activity)
def parse_activity(file: UploadFile = File(...)) -> Activity:
    """Parse a single GPX or TCX file.

    Raises:
        HTTPException: 422 if the file cannot be parsed
    """
    text, file_name = _read_upload(file)
    logger.info(f"[PARSE] Parse request for filename={file_name}")

    try:
        return parse_activity_text(text, file_name)
    except ActivityParseError as e:
        logger.warning(f"[PARSE] Parse failed: [{e.code}] {e.message}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=_parse_error_detail(e),
        ) from e
    except Exception as e:
        logger.exception(f"[PARSE] Unexpected parse error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to parse activity file",
        ) from e


def _load_workspace(
    file_a: UploadFile,
    file_b: UploadFile | None,
    labels: dict[SlotName, str | None] | None = None,
) -> ComparisonWorkspace:
    workspace = ComparisonWorkspace()
    for name, upload in ((SlotName.A, file_a), (SlotName.B, file_b)):
        if upload is None:
            continue
        text, file_name = _read_upload(upload)
        workspace.load(name, text, file_name)

    errors = {
        slot.name.value: {"code": slot.error_code, "message": slot.error, "file_name": slot.file_name}
        for slot in workspace.slots.values()
        if slot.error is not None
    }
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)

    for name, label in (labels or {}).items():
        if label is not None and workspace[name].loaded:
            workspace.set_label(name, label)
    return workspace


@router.post("/merge")
def merge_activity_files(
    file_a: UploadFile = File(...),
    file_b: UploadFile = File(...),
    base: SlotName = Form(SlotName.A),
    hr_source: SlotName = Form(SlotName.B),
    label_a: str | None = Form(None),
    label_b: str | None = Form(None),
) -> Response:
    """Merge heart rate from one file into the other's track and return GPX.

    Returns:
        GPX file download response

    Raises:
        HTTPException: 422 if either file cannot be parsed
    """
    workspace = _load_workspace(file_a, file_b, labels={SlotName.A: label_a, SlotName.B: label_b})
    logger.info(f"[MERGE] Track from {workspace[base].merge_label}, heart rate from {workspace[hr_source].merge_label}")

    try:
        merged = workspace.merge(base, hr_source)
    except SlotNotLoadedError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return Response(
        build_gpx(merged),
        media_type=GPX_MIME_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename={settings.merged_file_name}",
        },
    )


@router.post("/compare")
def compare_activity_files(
    file_a: UploadFile = File(...),
    file_b: UploadFile | None = File(None),
    window_size: int = Form(settings.default_smoothing_window),
    label_a: str | None = Form(None),
    label_b: str | None = Form(None),
    pace_range: str | None = Form(None),
) -> dict:
    """Align one or two files per second for heart-rate and pace comparison.

    Args:
        window_size: Odd pace smoothing window
        label_a: Custom label for slot A; defaults to the device name
        label_b: Custom label for slot B; defaults to the device name
        pace_range: Optional ``slowest..fastest`` range, e.g. ``9:00..3:00``

    Returns:
        Summaries per slot and the aligned samples, pace smoothed over ``window_size``

    Raises:
        HTTPException: 400 for an invalid window size or pace range
        HTTPException: 422 if a file cannot be parsed or the timeline is too long
    """
    try:
        check_window_size(window_size)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    pace_bounds = None
    if pace_range:
        pace_bounds = parse_pace_range(pace_range)
        if pace_bounds is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="pace_range must look like 9:00..3:00",
            )

    workspace = _load_workspace(file_a, file_b, labels={SlotName.A: label_a, SlotName.B: label_b})

    try:
        samples = workspace.compare(window_size, max_seconds=settings.max_compare_seconds, pace_range=pace_bounds)
    except ComparisonTooLongError as e:
        logger.warning(f"[COMPARE] Refused: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "timeline_too_long", "message": str(e), "seconds": e.seconds, "limit": e.limit},
        ) from e
    logger.info(f"[COMPARE] Aligned {len(samples)} seconds with window_size={window_size}")

    return {
        "summaries": {name.value: summary for name, summary in workspace.summaries().items()},
        "samples": samples,
    }
