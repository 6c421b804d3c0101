import json

import pytest
from fastapi.testclient import TestClient

from conftest import ALICE, RecordingChannel
from fixit.server.main import create_app
from fixit.server.settings.config import Settings


@pytest.fixture
def channel():
    return RecordingChannel(name="whatsapp")


@pytest.fixture
def app(ledger_path, upload_dir, channel):
    settings = Settings(
        environment="dev",
        repairs_file=str(ledger_path),
        upload_dir=str(upload_dir),
        admin_username="franclim",
        admin_password="hunter2",
    )
    return create_app(settings, channels=[channel])


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def login(client, username="franclim", password="hunter2"):
    return client.post("/login", data={"username": username, "password": password}, follow_redirects=False)


@pytest.fixture
def admin(client):
    assert login(client).status_code == 303
    return client


def _ledger(ledger_path):
    return json.loads(ledger_path.read_text(encoding="utf-8"))


# ==============================
# PUBLIKT
# ==============================

def test_health(client):
    assert client.get("/health").json() == {"message": "ok"}


def test_home_redirects_to_form(client):
    r = client.get("/", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/repair-form"


def test_repair_form_renders(client):
    r = client.get("/repair-form")
    assert r.status_code == 200
    assert "action='/repair-request'" in r.text


def test_submit_without_photo(client, ledger_path, channel):
    r = client.post("/repair-request", data=ALICE)
    assert r.status_code == 200
    assert "Thanks Alice! Your Phone repair request has been sent." in r.text

    data = _ledger(ledger_path)
    assert len(data) == 1
    rec = data[0]
    assert {k: rec[k] for k in ALICE} == ALICE
    assert "photo" not in rec and "quote" not in rec and "status" not in rec
    assert len(channel.sent) == 1


def test_submit_with_photo(client, ledger_path, upload_dir):
    r = client.post(
        "/repair-request",
        data=ALICE,
        files={"photo": ("cracked screen.jpg", b"\xff\xd8jpeg", "image/jpeg")},
    )
    assert r.status_code == 200

    photo = _ledger(ledger_path)[0]["photo"]
    assert photo.startswith("/uploads/") and photo.endswith("-cracked_screen.jpg")
    stored = upload_dir / photo.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"\xff\xd8jpeg"

    served = client.get(photo)
    assert served.status_code == 200
    assert served.content == b"\xff\xd8jpeg"


def test_submit_missing_fields_is_400(client, ledger_path, upload_dir):
    r = client.post(
        "/repair-request",
        data=dict(ALICE, device=""),
        files={"photo": ("x.jpg", b"x", "image/jpeg")},
    )
    assert r.status_code == 400
    assert r.json()["missing"] == ["device"]
    assert not ledger_path.exists()
    assert list(upload_dir.iterdir()) == []


def test_submit_succeeds_when_notification_fails(ledger_path, upload_dir):
    settings = Settings(repairs_file=str(ledger_path), upload_dir=str(upload_dir))
    app = create_app(settings, channels=[RecordingChannel(name="whatsapp", fail=True)])
    with TestClient(app) as c:
        r = c.post("/repair-request", data=ALICE)
    assert r.status_code == 200
    assert len(_ledger(ledger_path)) == 1


def test_two_quick_submissions_get_distinct_ids(client, admin):
    client.post("/repair-request", data=ALICE)
    client.post("/repair-request", data=dict(ALICE, name="Bob"))
    ids = [r["id"] for r in admin.get("/repairs").json()]
    assert len(ids) == 2 and ids[0] != ids[1]


def test_corrupt_ledger_fails_submission(client, ledger_path):
    ledger_path.write_text("{oops", encoding="utf-8")
    r = client.post("/repair-request", data=ALICE)
    assert r.status_code == 500
    assert ledger_path.read_text(encoding="utf-8") == "{oops"


# ==============================
# INLOGGNING
# ==============================

@pytest.mark.parametrize("path", ["/repairs", "/dashboard"])
def test_admin_pages_redirect_when_anonymous(client, path):
    r = client.get(path, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login"


@pytest.mark.parametrize("action", ["complete", "delete"])
def test_admin_actions_refused_when_anonymous(client, ledger_path, action):
    client.post("/repair-request", data=ALICE)
    before = ledger_path.read_text(encoding="utf-8")
    rid = _ledger(ledger_path)[0]["id"]

    r = client.post(f"/repair/{rid}/{action}", follow_redirects=False)
    assert r.status_code == 303
    assert ledger_path.read_text(encoding="utf-8") == before


def test_list_refused_then_allowed_after_login(client):
    assert client.get("/repairs", follow_redirects=False).status_code == 303
    login(client)
    r = client.get("/repairs")
    assert r.status_code == 200
    assert r.json() == []


def test_bad_login(client):
    r = login(client, password="wrong")
    assert r.status_code == 401
    assert "Login failed" in r.text
    assert client.get("/repairs", follow_redirects=False).status_code == 303


def test_login_page(client):
    r = client.get("/login")
    assert r.status_code == 200
    assert "name='password'" in r.text


def test_logout_ends_session(admin):
    assert admin.get("/repairs").status_code == 200
    r = admin.get("/logout", follow_redirects=False)
    assert r.status_code == 303
    assert admin.get("/repairs", follow_redirects=False).status_code == 303


def test_stolen_cookie_is_dead_after_logout(client):
    login(client)
    cookie = client.cookies.get("fixit_session")
    client.get("/logout")

    client.cookies.set("fixit_session", cookie)
    assert client.get("/repairs", follow_redirects=False).status_code == 303


# ==============================
# ADMIN
# ==============================

def test_dashboard_lists_requests(client, admin):
    client.post("/repair-request", data=dict(ALICE, issue="<b>bold</b>"))
    r = admin.get("/dashboard")
    assert r.status_code == 200
    assert "Alice" in r.text
    assert "&lt;b&gt;bold&lt;/b&gt;" in r.text


def test_complete_quote_and_delete(client, admin, ledger_path):
    client.post("/repair-request", data=ALICE)
    rid = admin.get("/repairs").json()[0]["id"]

    assert admin.post(f"/repair/{rid}/complete").json() == {"status": "ok"}
    assert admin.post(f"/repair/{rid}/quote", data={"quote": "49.99"}).status_code == 200

    rec = admin.get("/repairs").json()[0]
    assert rec["status"] == "Completed"
    assert rec["quote"] == 49.99

    assert admin.post(f"/repair/{rid}/delete").status_code == 200
    assert admin.get("/repairs").json() == []


def test_invalid_quote_is_400_and_unchanged(client, admin):
    client.post("/repair-request", data=ALICE)
    rid = admin.get("/repairs").json()[0]["id"]
    admin.post(f"/repair/{rid}/quote", data={"quote": "20"})

    r = admin.post(f"/repair/{rid}/quote", data={"quote": "abc"})
    assert r.status_code == 400
    assert admin.get("/repairs").json()[0]["quote"] == 20.0


def test_unknown_id_is_silent_success(client, admin, ledger_path):
    client.post("/repair-request", data=ALICE)
    before = ledger_path.read_text(encoding="utf-8")
    for action in ("complete", "delete"):
        assert admin.post(f"/repair/1/{action}").status_code == 200
    assert admin.post("/repair/1/quote", data={"quote": "5"}).status_code == 200
    assert ledger_path.read_text(encoding="utf-8") == before


def test_delete_removes_photo(client, admin, upload_dir):
    client.post("/repair-request", data=ALICE, files={"photo": ("p.jpg", b"x", "image/jpeg")})
    rid = admin.get("/repairs").json()[0]["id"]
    assert len(list(upload_dir.iterdir())) == 1

    admin.post(f"/repair/{rid}/delete")
    assert list(upload_dir.iterdir()) == []


def test_dashboard_form_post_redirects_back(client, admin):
    client.post("/repair-request", data=ALICE)
    rid = admin.get("/repairs").json()[0]["id"]
    r = admin.post(f"/repair/{rid}/complete", headers={"accept": "text/html"}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/dashboard"


def test_corrupt_ledger_is_500_for_admin(admin, ledger_path):
    ledger_path.write_text("[{", encoding="utf-8")
    r = admin.get("/repairs")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to load repair requests."}
