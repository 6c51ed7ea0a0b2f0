"""FastAPI server that records submitted receipts in the ledger."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.cors import CORSMiddleware

from tallysheet.domain.receipt import ReceiptRecord
from tallysheet.errors import LedgerError, ParseError
from tallysheet.ledger.writer import Accepted, Duplicate, LedgerWriter, SubmitResult
from tallysheet.runtime import get_logger
from tallysheet.runtime.storage import get_ledger_writer

logger = get_logger(__name__)

LIVENESS_MESSAGE = "Receipt ledger is running! Use POST to submit receipt data."
SAVED_MESSAGE = "Receipt saved successfully"

app = FastAPI(title="Receipt Ledger")
# The receipt web page posts from its own origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def parse_body(body: bytes) -> ReceiptRecord:
    """Decode a request body into a ReceiptRecord."""
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ParseError(f"Request body must be a JSON object, got {type(payload).__name__}")
    return ReceiptRecord.from_payload(payload)


def result_payload(result: SubmitResult) -> dict[str, Any]:
    """Render a writer result as the JSON body returned to the caller."""
    if isinstance(result, Accepted):
        return {"success": True, "message": SAVED_MESSAGE, "row": result.row_index}
    if isinstance(result, Duplicate):
        existing = result.existing
        return {
            "isDuplicate": True,
            "row": result.row_index,
            "existingReceipt": {
                "merchant": existing.merchant,
                "date": existing.date,
                "total": existing.total,
            },
            "message": (
                f"Duplicate found: {existing.merchant} on {existing.date} for {existing.currency} {existing.total}"
            ),
        }
    return {"success": False, "error": result.error}


@app.post("/")
@app.post("/receipts")
async def submit_receipt(request: Request, writer: LedgerWriter = Depends(get_ledger_writer)) -> JSONResponse:
    """Record a receipt, or report the existing row it duplicates."""
    body = await request.body()
    try:
        record = parse_body(body)
    except LedgerError as e:
        logger.warning(f"Rejected receipt payload: {e}")
        return JSONResponse({"success": False, "error": str(e)}, status_code=400)

    # Store operations are blocking file I/O.
    result = await run_in_threadpool(writer.submit, record)
    status_code = 200 if isinstance(result, (Accepted, Duplicate)) else 500
    return JSONResponse(result_payload(result), status_code=status_code)


@app.get("/", response_class=PlainTextResponse)
async def liveness() -> str:
    """Plain-text probe used to check a deployment."""
    return LIVENESS_MESSAGE


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
