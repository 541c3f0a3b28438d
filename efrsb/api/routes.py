import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse, Response

from efrsb.api.context import AppContext
from efrsb.api.schemas import ExportRequest, SearchRequest
from efrsb.export.exporters import outcomes_to_csv, records_to_csv, to_json
from efrsb.fetcher.exceptions import SessionBusyError
from efrsb.logging.logger import Log
from efrsb.search.aggregator import deduplicate, summarize
from efrsb.search.progress import QueueSubscriber

router = APIRouter(prefix="/api", tags=["search"])
ws_router = APIRouter(tags=["progress"])


def _context(request: Request) -> AppContext:
    return request.app.state.context


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "results": [], "error": message},
    )


@router.post("/search")
async def search(payload: SearchRequest, request: Request) -> dict:
    """Run one registry query by debtor name, case number or INN."""
    ctx = _context(request)
    result = await ctx.search_service.search(payload.to_query(ctx.settings.default_region))
    return result.to_dict()


@router.post("/bulkSearch", response_model=None)
async def bulk_search(request: Request) -> dict | JSONResponse:
    """Check a list of INNs against the registry, one at a time."""
    try:
        body: Any = await request.json()
    except ValueError:
        return _bad_request("Invalid JSON body")
    inn_list = body.get("innList") if isinstance(body, dict) else None
    if not isinstance(inn_list, list) or not all(isinstance(i, str) for i in inn_list):
        return _bad_request("Invalid or missing innList")

    identifiers = deduplicate(inn_list) if body.get("deduplicate") else inn_list
    ctx = _context(request)
    if ctx.session_manager.busy:
        raise HTTPException(status_code=409, detail="Поиск уже выполняется")

    ctx.cancel_event = asyncio.Event()
    try:
        result = await ctx.orchestrator.run_batch(identifiers, cancel_event=ctx.cancel_event)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    finally:
        ctx.cancel_event = None

    payload = result.to_dict()
    payload["totalSubmitted"] = len(inn_list)
    payload["summary"] = summarize(result.outcomes).to_dict()
    return payload


@router.post("/bulkSearch/cancel")
async def cancel_bulk_search(request: Request) -> dict:
    """Ask the running batch to stop before its next item."""
    ctx = _context(request)
    if ctx.cancel_event is None:
        return {"cancelled": False}
    ctx.cancel_event.set()
    Log.info("Batch cancellation requested")
    return {"cancelled": True}


@router.get("/progress")
async def get_progress(request: Request) -> dict:
    """Latest progress event, or zeros when nothing has run yet."""
    return _context(request).snapshot.current().to_dict()


@router.post("/export/{fmt}")
async def export(fmt: str, payload: ExportRequest) -> Response:
    """Render search results as a downloadable JSON or CSV file."""
    if fmt not in ("json", "csv"):
        raise HTTPException(status_code=400, detail="fmt must be json or csv")
    if payload.results is not None:
        items = [r.to_domain() for r in payload.results]
        name = "bulk_results"
        body = to_json(items) if fmt == "json" else outcomes_to_csv(items)
    elif payload.cases is not None:
        cases = [c.to_domain() for c in payload.cases]
        name = "bankruptcy_cases"
        body = to_json(cases) if fmt == "json" else records_to_csv(cases)
    else:
        raise HTTPException(status_code=400, detail="results or cases is required")

    media_type = "application/json" if fmt == "json" else "text/csv; charset=utf-8"
    return Response(
        content=body.encode("utf-8"),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{name}.{fmt}"'},
    )


@ws_router.websocket("/ws/progress")
async def progress_stream(websocket: WebSocket) -> None:
    """Push every progress event to the connected client as JSON."""
    ctx: AppContext = websocket.app.state.context
    await websocket.accept()
    Log.info("Progress websocket connected")
    subscriber = QueueSubscriber(ctx.channel)
    forwarder = asyncio.create_task(_forward_events(websocket, subscriber))
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        subscriber.close()
        forwarder.cancel()
        try:
            await forwarder
        except asyncio.CancelledError:
            pass
        except Exception as exc:
            Log.warning(f"Progress websocket send failed: {exc}")
        Log.info("Progress websocket disconnected")


async def _forward_events(websocket: WebSocket, subscriber: QueueSubscriber) -> None:
    while True:
        event = await subscriber.get()
        await websocket.send_json(event.to_dict())
