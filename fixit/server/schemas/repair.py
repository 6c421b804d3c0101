# fil: fixit/server/schemas/repair.py
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

STATUS_COMPLETED = "Completed"


class RepairSubmission(BaseModel):
    """
    Fälten från reparationsformuläret.
    Ingen validering här – tomma fält fångas av RepairService.submit.
    """
    name: str = ""
    contact: str = ""
    device: str = ""
    issue: str = ""
    method: str = ""


class RepairRecord(BaseModel):
    """
    En post i ledgern (repairs.json).

    Valfria fält (photo, quote, status) utelämnas helt i JSON när de saknas,
    de skrivs aldrig som null. Äldre filer med null läses in som "saknas".
    Okända nycklar behålls så att en omskrivning inte tappar data, och fält
    som saknades i filen läggs inte till vid omskrivning.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    name: str = ""
    contact: str = ""
    device: str = ""
    issue: str = ""
    method: str = ""
    photo: Optional[str] = None
    quote: Optional[float] = None
    status: Optional[str] = None
    submitted_at: str = Field(default="", alias="submittedAt")

    @property
    def completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, exclude_unset=True)
