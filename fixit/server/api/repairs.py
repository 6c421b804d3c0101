# fil: fixit/server/api/repairs.py

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from fixit.core.errors import RepairError
from fixit.core.render import render_dashboard, render_repair_form, render_thanks
from fixit.server.api.auth import require_admin
from fixit.server.schemas.repair import RepairSubmission
from fixit.services.repair_service import RepairService
from fixit.services.uploads import discard_upload, save_upload


def get_service(request: Request) -> RepairService:
    return request.app.state.service


def _action_done(request: Request):
    # formulär från dashboarden → tillbaka dit, fetch/API → JSON
    if "text/html" in request.headers.get("accept", ""):
        return RedirectResponse("/dashboard", status_code=303)
    return {"status": "ok"}


# ==============================
# PUBLIKT: FORMULÄR & INSKICK
# ==============================

router = APIRouter(tags=["repairs"])


@router.get("/", include_in_schema=False)
def home():
    return RedirectResponse("/repair-form", status_code=303)


@router.get("/repair-form", response_class=HTMLResponse)
def repair_form(request: Request):
    return HTMLResponse(render_repair_form(request.app.state.settings.app_name))


@router.post("/repair-request", response_class=HTMLResponse)
def submit_repair_request(
    request: Request,
    background_tasks: BackgroundTasks,
    name: str = Form(""),
    contact: str = Form(""),
    device: str = Form(""),
    issue: str = Form(""),
    method: str = Form(""),
    photo: Optional[UploadFile] = File(None),
):
    service = get_service(request)
    submission = service.validate(
        RepairSubmission(name=name, contact=contact, device=device, issue=issue, method=method)
    )

    upload_dir = request.app.state.upload_dir
    photo_ref = None
    if photo is not None and photo.filename:
        photo_ref = save_upload(upload_dir, photo.filename, photo.file)

    try:
        record = service.submit(submission, photo=photo_ref, defer=background_tasks.add_task)
    except RepairError:
        # posten sparades inte – ta bort fotot så det inte blir föräldralöst
        discard_upload(upload_dir, photo_ref)
        raise

    return HTMLResponse(render_thanks(record))


# ==============================
# ADMIN (kräver inloggning)
# ==============================

admin_router = APIRouter(tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request):
    return HTMLResponse(render_dashboard(get_service(request).list_all()))


@admin_router.get("/repairs", summary="List all repair requests")
def list_repairs(request: Request):
    return JSONResponse([r.to_json() for r in get_service(request).list_all()])


@admin_router.post("/repair/{repair_id}/complete")
def complete_repair(repair_id: int, request: Request):
    get_service(request).mark_complete(repair_id)
    return _action_done(request)


@admin_router.post("/repair/{repair_id}/quote")
def update_quote(repair_id: int, request: Request, quote: str = Form("")):
    get_service(request).set_quote(repair_id, quote)
    return _action_done(request)


@admin_router.post("/repair/{repair_id}/delete")
def delete_repair(repair_id: int, request: Request):
    get_service(request).delete(repair_id)
    return _action_done(request)
