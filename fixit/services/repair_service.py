# fil: fixit/services/repair_service.py

from __future__ import annotations

import logging
import math
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from fixit.core.errors import InvalidQuote, ValidationError
from fixit.server.schemas.repair import STATUS_COMPLETED, RepairRecord, RepairSubmission
from fixit.services.notifications import NotificationDispatcher
from fixit.services.repair_store import RepairStore
from fixit.services.uploads import discard_upload

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "contact", "device", "issue")


class IdGenerator:
    """
    Id = millisekunder sedan epoch. Har klockan inte hunnit ticka sedan förra
    id:t (eller ligger ledgern före) tar vi förra + 1, så två inskick i samma
    millisekund får ändå olika id inom processen.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def seed(self, existing_ids: Iterable[int]) -> None:
        with self._lock:
            self._last = max([self._last, *existing_ids])

    def next_id(self) -> int:
        with self._lock:
            candidate = int(self._clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


def _utc_timestamp() -> str:
    # samma format som JavaScripts toISOString(): 2024-05-01T12:00:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_quote(value: Any) -> float:
    """
    "49.99" → 49.99, " 50 " → 50.0, 12 → 12.0
    Tomt, text, NaN och oändligt → InvalidQuote
    """
    if isinstance(value, bool):
        raise InvalidQuote(value)
    try:
        amount = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise InvalidQuote(value) from None
    if not math.isfinite(amount):
        raise InvalidQuote(value)
    return amount


class RepairService:
    """
    Arbetsflödet kring reparationsposter.

    Alla ändringar är läs hela ledgern → ändra i minnet → skriv hela ledgern.
    Inom processen körs de en i taget (self._write_lock). Mellan processer
    gäller fortfarande att den som skriver sist vinner.
    """

    def __init__(
        self,
        store: RepairStore,
        *,
        dispatcher: Optional[NotificationDispatcher] = None,
        upload_dir: Optional[Path] = None,
        id_generator: Optional[IdGenerator] = None,
        now: Callable[[], str] = _utc_timestamp,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher
        self.upload_dir = Path(upload_dir) if upload_dir is not None else None
        self.ids = id_generator or IdGenerator()
        self._now = now
        self._write_lock = threading.RLock()

    # ==============================
    # SKAPA
    # ==============================

    @staticmethod
    def validate(fields: Union[RepairSubmission, Mapping[str, Any]]) -> RepairSubmission:
        if isinstance(fields, RepairSubmission):
            data = fields.model_dump()
        else:
            data = {f: fields.get(f) for f in RepairSubmission.model_fields}
        cleaned = RepairSubmission(**{k: ("" if v is None else str(v)).strip() for k, v in data.items()})
        missing = [f for f in REQUIRED_FIELDS if not getattr(cleaned, f)]
        if missing:
            raise ValidationError(missing)
        return cleaned

    def submit(
        self,
        fields: Union[RepairSubmission, Mapping[str, Any]],
        photo: Optional[str] = None,
        *,
        defer: Optional[Callable[..., Any]] = None,
    ) -> RepairRecord:
        """
        Skapar en ny post, sparar den och larmar via dispatchern.

        defer: t.ex. BackgroundTasks.add_task – då skickas notiserna efter att
        svaret gått iväg. Utan defer skickas de direkt, men fel loggas bara.
        Posten är alltid sparad innan någon notis försöks.
        """
        submission = self.validate(fields)

        with self._write_lock:
            records = self.store.load()
            self.ids.seed(r.id for r in records)
            record = RepairRecord(
                id=self.ids.next_id(),
                **submission.model_dump(),
                photo=photo or None,
                submitted_at=self._now(),
            )
            records.append(record)
            self.store.persist(records)

        logger.info("repair %s saved (%s, %s)", record.id, record.name, record.device)

        if self.dispatcher is not None:
            if defer is not None:
                defer(self._dispatch, record)
            else:
                self._dispatch(record)

        return record

    def _dispatch(self, record: RepairRecord) -> None:
        try:
            self.dispatcher.notify(record)
        except Exception:
            logger.exception("notification dispatch crashed for repair %s", record.id)

    # ==============================
    # LÄSA
    # ==============================

    def list_all(self) -> List[RepairRecord]:
        return self.store.load()

    # ==============================
    # ÄNDRA
    # ==============================

    def _update(self, repair_id: int, changes: Mapping[str, Any]) -> bool:
        with self._write_lock:
            records = self.store.load()
            matched = False
            updated: List[RepairRecord] = []
            for r in records:
                if r.id == repair_id:
                    r = RepairRecord.model_validate({**r.to_json(), **changes})
                    matched = True
                updated.append(r)
            if matched:
                self.store.persist(updated)
        return matched

    def mark_complete(self, repair_id: int) -> bool:
        """Sätter status "Completed". Okänt id = ingen ändring, inget fel."""
        matched = self._update(repair_id, {"status": STATUS_COMPLETED})
        if not matched:
            logger.info("mark_complete: no repair with id %s", repair_id)
        return matched

    def set_quote(self, repair_id: int, amount: Any) -> bool:
        quote = parse_quote(amount)
        matched = self._update(repair_id, {"quote": quote})
        if not matched:
            logger.info("set_quote: no repair with id %s", repair_id)
        return matched

    def delete(self, repair_id: int) -> bool:
        """
        Tar bort posten och (best-effort) dess foto i upload-katalogen.
        Fotot tas bort först när ledgern är skriven.
        """
        with self._write_lock:
            records = self.store.load()
            target = next((r for r in records if r.id == repair_id), None)
            if target is None:
                logger.info("delete: no repair with id %s", repair_id)
                return False
            self.store.persist([r for r in records if r.id != repair_id])

        if target.photo and self.upload_dir is not None:
            discard_upload(self.upload_dir, target.photo)

        logger.info("repair %s deleted", repair_id)
        return True
