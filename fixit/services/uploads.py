# fil: fixit/services/uploads.py
"""
Uppladdade foton.

Filerna sparas som <ms-tidsstämpel>-<rensat filnamn> i upload-katalogen och
refereras i ledgern som "/uploads/<filnamn>". Filen skrivs en gång, serveras
statiskt och tas bort när posten raderas.
"""

from __future__ import annotations

import logging
import re
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Callable, Optional

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads/"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_LEN = 120


def sanitize_filename(name: str) -> str:
    """
    "C:\\Users\\me\\My Photo.JPG" → "My_Photo.JPG"
    Tomt eller bara skräptecken → "photo"
    """
    base = (name or "").replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    if not cleaned:
        return "photo"
    return cleaned[-_MAX_NAME_LEN:]


def save_upload(
    upload_dir: Path,
    original_name: str,
    stream: BinaryIO,
    *,
    clock: Callable[[], float] = time.time,
) -> str:
    """
    Sparar en uppladdad fil och returnerar referensen som lagras i posten.
    """
    upload_dir = Path(upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    stem = f"{int(clock() * 1000)}-{sanitize_filename(original_name)}"
    filename = stem
    attempt = 0
    while True:
        target = upload_dir / filename
        try:
            with target.open("xb") as out:
                shutil.copyfileobj(stream, out)
            break
        except FileExistsError:
            attempt += 1
            filename = f"{attempt}-{stem}"

    logger.info("saved upload %s", filename)
    return UPLOAD_URL_PREFIX + filename


def resolve_managed_photo(upload_dir: Path, ref: Optional[str]) -> Optional[Path]:
    """
    Översätter en foto-referens till en sökväg, men bara om den pekar på en fil
    direkt i upload-katalogen. Allt annat (externa URL:er, "../", underkataloger)
    ger None.
    """
    if not ref or not ref.startswith(UPLOAD_URL_PREFIX):
        return None

    name = ref[len(UPLOAD_URL_PREFIX):]
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        return None

    root = Path(upload_dir).resolve()
    candidate = (root / name).resolve()
    if candidate.parent != root:
        return None
    return candidate


def discard_upload(upload_dir: Path, ref: Optional[str]) -> bool:
    """
    Best-effort borttagning. Returnerar True om en fil faktiskt togs bort.
    Fel loggas, de kastas aldrig vidare.
    """
    path = resolve_managed_photo(upload_dir, ref)
    if path is None:
        return False

    try:
        path.unlink()
    except FileNotFoundError:
        logger.info("photo %s already gone", ref)
        return False
    except OSError as e:
        logger.warning("could not remove photo %s: %s", ref, e)
        return False

    logger.info("removed photo %s", ref)
    return True
