# fil: fixit/server/api/auth.py

from typing import Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from fixit.core.render import render_login
from fixit.services.session_gate import SessionGate

SESSION_COOKIE = "fixit_session"

router = APIRouter(tags=["auth"])


def get_gate(request: Request) -> SessionGate:
    return request.app.state.gate


def session_id_from(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE)


def require_admin(request: Request) -> None:
    """
    Dependency för admin-routes. Kastar Unauthenticated, som appen
    översätter till en redirect till /login.
    """
    get_gate(request).require_authenticated(session_id_from(request))


# ==============================
# LOGIN / LOGOUT
# ==============================

@router.get("/login", response_class=HTMLResponse)
def login_page():
    return HTMLResponse(render_login())


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
):
    gate = get_gate(request)

    # alltid nytt session-id vid inloggning
    old_session = session_id_from(request)
    session_id = gate.new_session_id()

    if not gate.authenticate(session_id, username, password):
        return HTMLResponse(render_login("Login failed. Try again."), status_code=401)

    gate.end_session(old_session)
    resp = RedirectResponse("/dashboard", status_code=303)
    resp.set_cookie(
        SESSION_COOKIE,
        session_id,
        httponly=True,
        samesite="lax",
        secure=request.app.state.settings.secure_cookies,
    )
    return resp


@router.get("/logout")
def logout(request: Request):
    get_gate(request).end_session(session_id_from(request))
    resp = RedirectResponse("/login", status_code=303)
    resp.delete_cookie(SESSION_COOKIE)
    return resp
