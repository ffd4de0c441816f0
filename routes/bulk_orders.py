"""
Bulk order import API routes.

One form endpoint drives both phases through an "intent" field:

    intent=process  customer_name, customer_id, file    -> preview rows
    intent=create   customer_name, customer_id, preview_json -> draft order

Errors come back in the standard error envelope together with the
customer fields and the submitted rows, so the operator can retry
without uploading again.
"""

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.bulk_order import HistoryListResponse, ReconciledRow
from services.bulk_order_service import (
    decode_preview_payload,
    get_bulk_order_service,
    validate_snapshot_rows,
)
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/bulk-orders", tags=["Bulk Orders"])


# ===================
# EXCEPTION HANDLER
# ===================

def _handle_error(
    e: Exception,
    customer_name: str = "",
    customer_id: str = "",
    rows: Optional[list] = None,
) -> JSONResponse:
    """
    Convert exception to JSON response, echoing the operator's input.

    rows may hold reconciled rows or the raw rows the caller submitted.
    """
    if isinstance(e, AppError):
        status_code = e.status_code
        content = e.to_dict()
    else:
        logger.error("unexpected_error", error=str(e), type=type(e).__name__)
        status_code = 500
        content = {
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }

    content.update({
        "mode": "error",
        "customer_name": customer_name,
        "customer_id": customer_id,
        "rows": [
            r.model_dump(mode="json") if isinstance(r, ReconciledRow) else r
            for r in rows or []
        ],
    })
    return JSONResponse(status_code=status_code, content=content)


# ===================
# ROUTES
# ===================

@router.post("")
async def bulk_order_action(
    intent: str = Form(..., description="process or create"),
    customer_name: str = Form("", description="Customer display name"),
    customer_id: str = Form("", description="Customer GID"),
    file: Optional[UploadFile] = File(None, description="CSV or Excel file"),
    preview_json: Optional[str] = Form(None, description="Rows returned by the preview"),
):
    """
    Preview an upload or create the draft order from a preview.

    Raises:
        422: Missing input, unreadable file, missing columns, no valid rows,
             nothing to order
        503: Draft order service failure
    """
    customer_name = customer_name.strip()
    customer_id = customer_id.strip()

    if intent == "process":
        try:
            content = await file.read() if file is not None else None
            service = get_bulk_order_service()
            return service.preview(
                customer_name,
                customer_id,
                content,
                filename=file.filename if file is not None else None,
            )
        except Exception as e:
            return _handle_error(e, customer_name, customer_id)

    if intent == "create":
        # Errors echo the submitted rows as-is, including any that failed validation
        raw_rows = decode_preview_payload(preview_json)
        try:
            rows = validate_snapshot_rows(raw_rows)
            service = get_bulk_order_service()
            return service.confirm(customer_name, customer_id, rows)
        except Exception as e:
            return _handle_error(e, customer_name, customer_id, raw_rows)

    logger.debug("bulk_order_unknown_intent", intent=intent)
    return {"mode": "idle"}


@router.get("/history", response_model=HistoryListResponse)
async def get_history(
    limit: Optional[int] = Query(None, ge=1, le=500, description="Max records"),
):
    """Recent draft orders created from uploads for this shop."""
    try:
        records = get_bulk_order_service().recent_history(limit)
        return HistoryListResponse(data=records, total=len(records))
    except Exception as e:
        return _handle_error(e)
