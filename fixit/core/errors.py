# fil: fixit/core/errors.py
"""
Fel som kärnan kan kasta.

  RepairError
    ├── ReadError           ledgern kunde inte läsas (I/O)
    │     └── CorruptLedger  ledgern finns men är inte giltig JSON-lista av poster
    ├── PersistError        ledgern kunde inte skrivas
    ├── ValidationError     obligatoriska fält saknas i en inskickad förfrågan
    ├── InvalidQuote        offertbeloppet är inte ett tal
    ├── NotificationFailure en kanal kunde inte leverera (loggas bara)
    └── Unauthenticated     admin-operation utan inloggad session
"""

from __future__ import annotations

from typing import List, Optional


class RepairError(Exception):
    """Basklass för alla domänfel."""


class ReadError(RepairError):
    pass


class CorruptLedger(ReadError):
    pass


class PersistError(RepairError):
    pass


class ValidationError(RepairError):
    def __init__(self, missing: List[str], message: Optional[str] = None) -> None:
        self.missing = list(missing)
        super().__init__(message or "Missing required fields: " + ", ".join(self.missing))


class InvalidQuote(RepairError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Quote must be a number, got {value!r}")


class NotificationFailure(RepairError):
    def __init__(self, channel: str, reason: str) -> None:
        self.channel = channel
        self.reason = reason
        super().__init__(f"{channel}: {reason}")


class Unauthenticated(RepairError):
    pass
