# fil: fixit/services/repair_store.py

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List

from pydantic import ValidationError as PydanticValidationError

from fixit.core.errors import CorruptLedger, PersistError, ReadError
from fixit.server.schemas.repair import RepairRecord

logger = logging.getLogger(__name__)


class RepairStore:
    """
    Ledgern: en JSON-fil med en lista av reparationsposter.

    Varje operation är hela filen in / hela filen ut. Det finns ingen låsning
    mellan processer – två samtidiga persist() skriver över varandra och den som
    skriver sist vinner. RepairService serialiserar skrivningar inom processen.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> List[RepairRecord]:
        """
        Läser in hela ledgern.

          - fil saknas / tom fil  → []
          - trasig JSON, inte en lista, ogiltiga poster → CorruptLedger
          - I/O-fel → ReadError

        En trasig fil behandlas aldrig som tom, då skulle nästa skrivning
        radera allt som fanns.
        """
        if not self.path.exists():
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ReadError(f"Could not read {self.path}: {e}") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("ledger %s is not valid JSON: %s", self.path, e)
            raise CorruptLedger(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            logger.error("ledger %s holds %s, expected a list", self.path, type(data).__name__)
            raise CorruptLedger(f"{self.path} does not hold a list of records")

        return [self._parse_item(i, item) for i, item in enumerate(data)]

    def _parse_item(self, index: int, item: Any) -> RepairRecord:
        if not isinstance(item, dict):
            raise CorruptLedger(f"{self.path}: entry {index} is not an object")
        try:
            return RepairRecord.model_validate(item)
        except PydanticValidationError as e:
            logger.error("ledger %s: invalid entry %d: %s", self.path, index, e)
            raise CorruptLedger(f"{self.path}: entry {index} is not a valid record") from e

    def persist(self, records: Iterable[RepairRecord]) -> None:
        """
        Skriver hela samlingen till en temporärfil i samma katalog och byter
        sedan ut ledgern med os.replace. Misslyckas skrivningen ligger den
        gamla filen kvar orörd.
        """
        payload = json.dumps(
            [r.to_json() for r in records],
            ensure_ascii=False,
            indent=2,
        )

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=str(self.path.parent),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise PersistError(f"Could not write {self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
