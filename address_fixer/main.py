import asyncio
import logging
from functools import partial

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from .compositor import compose
from .config import FRONTEND_DIR, MAX_UPLOAD_SIZE
from .document import count_pages, get_pdf_bytes, output_filename, render_page, save_upload
from .errors import BusyError, CompositionError, DocumentIOError, InputValidationError
from .fragments import page_text_dump
from .locator import search_document
from .models import (
    DragRequest,
    PageTextResponse,
    ProcessRequest,
    SavedConfig,
    SearchRequest,
    SearchResponse,
    SelectionResponse,
    UploadResponse,
)
from .page_shift import shift
from .preferences import clear_config, load_config, save_config
from .reconciler import reconcile, selection_from_drag
from .session import Session, get_session, open_session

logger = logging.getLogger(__name__)

app = FastAPI(title="PDF Address Fixer")


async def _run_sync(fn, *args, **kwargs):
    """Run a blocking function in a thread so it doesn't stall the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(fn, *args, **kwargs))


def _session_or_404(doc_id: str) -> Session:
    try:
        return get_session(doc_id)
    except ValueError:
        raise HTTPException(400, "Invalid document id")
    except FileNotFoundError:
        raise HTTPException(404, "Document not found")


@app.post("/api/upload", response_model=UploadResponse)
async def upload_pdf(file: UploadFile = File(...)):
    if not file.filename or not file.filename.lower().endswith(".pdf"):
        raise HTTPException(400, "Only PDF files are accepted")
    content = await file.read()
    if len(content) == 0:
        raise HTTPException(400, "Empty file")
    if len(content) > MAX_UPLOAD_SIZE:
        raise HTTPException(400, f"File too large (max {MAX_UPLOAD_SIZE // 1024 // 1024} MB)")
    try:
        doc_id, page_count = await _run_sync(save_upload, content, file.filename)
    except DocumentIOError as e:
        raise HTTPException(400, f"Invalid PDF: {e}")
    except ValueError as e:
        raise HTTPException(400, str(e))
    open_session(doc_id, file.filename, page_count)
    return UploadResponse(doc_id=doc_id, page_count=page_count)


@app.get("/api/documents/{doc_id}/pages/{page_num}/image")
async def get_page_image(doc_id: str, page_num: int):
    try:
        png = await _run_sync(render_page, doc_id, page_num)
    except ValueError:
        raise HTTPException(400, "Invalid document id")
    except FileNotFoundError:
        raise HTTPException(404, "Document not found")
    except IndexError as e:
        raise HTTPException(404, str(e))
    return Response(content=png, media_type="image/png")


@app.get("/api/documents/{doc_id}/text", response_model=PageTextResponse)
async def get_document_text(doc_id: str):
    _session_or_404(doc_id)
    pdf_bytes = await _run_sync(get_pdf_bytes, doc_id)
    try:
        page_count = await _run_sync(count_pages, pdf_bytes)
        text = await _run_sync(page_text_dump, pdf_bytes)
    except DocumentIOError:
        raise HTTPException(400, "Error reading PDF.")
    return PageTextResponse(page_count=page_count, text=text)


@app.post("/api/documents/{doc_id}/search", response_model=SearchResponse)
async def search(doc_id: str, req: SearchRequest):
    session = _session_or_404(doc_id)
    pdf_bytes = await _run_sync(get_pdf_bytes, doc_id)
    try:
        result = await _run_sync(search_document, pdf_bytes, req.query)
    except InputValidationError as e:
        raise HTTPException(400, str(e))
    except DocumentIOError:
        raise HTTPException(400, "Error reading PDF.")

    session.mode = "auto"
    session.search_text = req.query
    session.matches = result.matches
    return SearchResponse(
        query=result.query,
        found=result.found,
        message=result.message,
        matches=result.matches,
    )


@app.post("/api/documents/{doc_id}/selection", response_model=SelectionResponse)
async def select_region(doc_id: str, req: DragRequest):
    session = _session_or_404(doc_id)
    pdf_bytes = await _run_sync(get_pdf_bytes, doc_id)
    try:
        page_count = await _run_sync(count_pages, pdf_bytes)
        if req.page_index >= page_count:
            raise InputValidationError(f"Page {req.page_index} out of range")
        selection = selection_from_drag(
            (req.start_x, req.start_y),
            (req.end_x, req.end_y),
            req.scale,
            req.page_index,
            req.viewport_height,
        )
    except InputValidationError as e:
        raise HTTPException(400, str(e))
    except DocumentIOError:
        raise HTTPException(400, "Error reading PDF.")

    session.mode = "manual"
    if selection is None:
        session.manual_selection = None
        return SelectionResponse(match=None, message="Selection too small.")
    session.manual_selection = reconcile(selection)
    return SelectionResponse(match=session.manual_selection, message="Region selected.")


@app.post("/api/documents/{doc_id}/process")
async def process_document(doc_id: str, req: ProcessRequest):
    session = _session_or_404(doc_id)
    matches = session.active_matches(req.mode)
    if not matches:
        raise HTTPException(400, "Nothing to replace: search or select a region first")

    try:
        with session.processing_gate():
            pdf_bytes = await _run_sync(get_pdf_bytes, doc_id)
            output = await _run_sync(compose, pdf_bytes, matches, req.new_address)
            output = await _run_sync(shift, output, req.shift_x, req.shift_y)
    except BusyError as e:
        raise HTTPException(409, str(e))
    except InputValidationError as e:
        raise HTTPException(400, str(e))
    except DocumentIOError:
        raise HTTPException(400, "Error reading PDF.")
    except CompositionError:
        raise HTTPException(500, "Failed to generate PDF.")

    save_config(
        SavedConfig(
            mode=req.mode,
            search_text=session.search_text,
            new_address=req.new_address,
            manual_selection=session.manual_selection,
        )
    )
    filename = output_filename(session.filename)
    logger.info("Processed %s -> %s", doc_id, filename)
    return Response(
        content=output,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/api/preferences", response_model=SavedConfig | None)
async def get_preferences():
    return load_config()


@app.put("/api/preferences", response_model=SavedConfig)
async def put_preferences(config: SavedConfig):
    save_config(config)
    return config


@app.delete("/api/preferences")
async def delete_preferences():
    clear_config()
    return {"status": "ok", "message": "Saved settings cleared."}


# Serve frontend static files (must be last to not shadow API routes)
if FRONTEND_DIR.is_dir():
    app.mount("/", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")
