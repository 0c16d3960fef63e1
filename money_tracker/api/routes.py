"""
HTTP routes.

One URL, two verbs, like the web-app deployment the client was built
against: GET fetches every entry, POST adds or deletes one. Both always
answer 200 with a JSON body; failures are reported inside the body.

POST bodies are read raw and parsed as JSON whatever the Content-Type,
so browser clients can send text/plain and skip the CORS preflight.
"""

from fastapi import APIRouter, Depends, Request

from money_tracker.audit import create_correlation_id
from money_tracker.config import get_settings
from money_tracker.models.entry import WriteResponse
from money_tracker.orchestrator import EntryFlow


router = APIRouter()


def get_entry_flow(request: Request) -> EntryFlow:
    """Dependency: the EntryFlow created at application startup."""
    return request.app.state.entry_flow


@router.get("/", summary="Fetch all entries", description="All entries, newest first.")
async def fetch_entries(flow: EntryFlow = Depends(get_entry_flow)) -> dict:
    return await flow.list_entries(correlation_id=create_correlation_id())


@router.post("/", summary="Add or delete an entry")
async def add_or_delete_entry(
    request: Request,
    flow: EntryFlow = Depends(get_entry_flow),
) -> dict:
    body = await request.body()

    max_bytes = get_settings().app.max_upload_size_bytes
    if len(body) > max_bytes:
        return WriteResponse(
            status="error",
            message=f"Request body exceeds {max_bytes} bytes",
        ).to_wire()

    return await flow.handle_post(body, correlation_id=create_correlation_id())


@router.get("/health", summary="Health check")
async def health(flow: EntryFlow = Depends(get_entry_flow)) -> dict:
    archiver = flow.receipt_archiver
    return {
        "ok": True,
        "table": flow.entry_store.table.name,
        "receipts": archiver.backend_name if archiver else "none",
    }
