# fil: fixit/core/render.py
"""
Render: enkla HTML-sidor för formulär, inloggning och dashboard.
- Alla värden från användare/ledger escapas
- Sidorna byggs av PAGE_TEMPLATE där {{title}} och {{body}} ersätts
- Dashboarden renderas på servern från list_all()
"""

from html import escape
from typing import Iterable, List, Optional

from fixit.server.schemas.repair import RepairRecord

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{title}}</title>
<style>
body { font-family: sans-serif; margin: 2rem; }
table { border-collapse: collapse; width: 100%; }
td, th { border: 1px solid #ccc; padding: .4rem; vertical-align: top; }
tr.completed { background: #eef8ee; }
.mono { font-family: monospace; }
.error { color: #b00; }
form.inline { display: inline; }
</style>
</head>
<body>
{{body}}
</body>
</html>
"""

METHODS = ("drop-off", "collection", "post")


def format_money(value: Optional[float]) -> str:
    """49.9 → "£49.90", None → "" """
    if value is None:
        return ""
    return "£{:,.2f}".format(float(value))


def _replace(html: str, key: str, value: str) -> str:
    return html.replace("{{" + key + "}}", value if value is not None else "")


def render_page(title: str, body: str) -> str:
    html = _replace(PAGE_TEMPLATE, "title", escape(title))
    return _replace(html, "body", body)


# ---------- Kundsidor ----------

def render_repair_form(app_name: str = "FixIt Repairs") -> str:
    options = "".join(
        "<option value='{m}'>{m}</option>".format(m=escape(m)) for m in METHODS
    )
    body = (
        "<h1>{app}</h1>"
        "<h2>Request a repair</h2>"
        "<form method='post' action='/repair-request' enctype='multipart/form-data'>"
        "<p><label>Name <input name='name' required></label></p>"
        "<p><label>Phone or email <input name='contact' required></label></p>"
        "<p><label>Device <input name='device' required></label></p>"
        "<p><label>What is wrong?<br><textarea name='issue' rows='4' cols='50' required></textarea></label></p>"
        "<p><label>How will you get it to us? <select name='method'>{options}</select></label></p>"
        "<p><label>Photo (optional) <input type='file' name='photo' accept='image/*'></label></p>"
        "<p><button type='submit'>Send request</button></p>"
        "</form>"
    ).format(app=escape(app_name), options=options)
    return render_page("Repair request", body)


def render_thanks(record: RepairRecord) -> str:
    body = "<h2>Thanks {name}! Your {device} repair request has been sent.</h2>".format(
        name=escape(record.name),
        device=escape(record.device),
    )
    return render_page("Request received", body)


# ---------- Admin ----------

def render_login(error: Optional[str] = None) -> str:
    error_html = "<p class='error'>{}</p>".format(escape(error)) if error else ""
    body = (
        "<h2>Admin login</h2>"
        "{error}"
        "<form method='post' action='/login'>"
        "<p><label>Username <input name='username' autocomplete='username'></label></p>"
        "<p><label>Password <input type='password' name='password' autocomplete='current-password'></label></p>"
        "<p><button type='submit'>Log in</button></p>"
        "</form>"
    ).format(error=error_html)
    return render_page("Login", body)


def _render_repair_rows(records: Iterable[RepairRecord]) -> str:
    rows: List[str] = []
    for r in records:
        photo = (
            "<a href='{p}'>photo</a>".format(p=escape(r.photo, quote=True)) if r.photo else ""
        )
        actions = (
            "<form class='inline' method='post' action='/repair/{id}/quote'>"
            "<input name='quote' size='6' value='{q}'><button>Set quote</button></form> "
            "<form class='inline' method='post' action='/repair/{id}/complete'><button>Complete</button></form> "
            "<form class='inline' method='post' action='/repair/{id}/delete'><button>Delete</button></form>"
        ).format(id=r.id, q="" if r.quote is None else "{:.2f}".format(r.quote))

        rows.append(
            "<tr class='{cls}'>"
            "<td class='mono'>{id}</td>"
            "<td class='mono'>{submitted}</td>"
            "<td>{name}<br>{contact}</td>"
            "<td>{device}</td>"
            "<td>{issue}</td>"
            "<td>{method}</td>"
            "<td>{photo}</td>"
            "<td class='mono'>{quote}</td>"
            "<td>{status}</td>"
            "<td>{actions}</td>"
            "</tr>".format(
                cls="completed" if r.completed else "",
                id=r.id,
                submitted=escape(r.submitted_at),
                name=escape(r.name),
                contact=escape(r.contact),
                device=escape(r.device),
                issue=escape(r.issue),
                method=escape(r.method),
                photo=photo,
                quote=format_money(r.quote),
                status=escape(r.status or "Open"),
                actions=actions,
            )
        )
    return "".join(rows)


def render_dashboard(records: List[RepairRecord]) -> str:
    if records:
        table = (
            "<table><thead><tr>"
            "<th>Id</th><th>Submitted</th><th>Customer</th><th>Device</th><th>Issue</th>"
            "<th>Method</th><th>Photo</th><th>Quote</th><th>Status</th><th></th>"
            "</tr></thead><tbody id='repair-rows'>{rows}</tbody></table>"
        ).format(rows=_render_repair_rows(records))
    else:
        table = "<p>No repair requests yet.</p>"

    body = (
        "<h2>Repair requests ({n})</h2>"
        "<p><a href='/logout'>Log out</a></p>"
        "{table}"
    ).format(n=len(records), table=table)
    return render_page("Dashboard", body)
