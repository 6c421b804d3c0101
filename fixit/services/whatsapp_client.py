# fil: fixit/services/whatsapp_client.py

from __future__ import annotations

from typing import Optional

import requests

from fixit.core.errors import NotificationFailure
from fixit.services.notifications import NotificationChannel

API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


def _whatsapp_address(number: str) -> str:
    number = number.strip()
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


class WhatsAppChannel(NotificationChannel):
    """
    WhatsApp-meddelande via Twilios REST-API (Messages-resursen).
    """

    name = "whatsapp"

    def __init__(
        self,
        *,
        account_sid: str,
        auth_token: str,
        from_number: str,
        to_number: str,
        timeout: float = 5.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = _whatsapp_address(from_number)
        self.to_number = _whatsapp_address(to_number)
        self.timeout = timeout
        self._http = http or requests.Session()

    def send(self, text: str) -> None:
        body = {
            "From": self.from_number,
            "To": self.to_number,
            "Body": text,
        }

        try:
            resp = self._http.post(
                API_URL.format(sid=self.account_sid),
                data=body,
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise NotificationFailure(self.name, f"timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise NotificationFailure(self.name, f"network error: {e}") from e

        if resp.status_code >= 300:
            raise NotificationFailure(self.name, f"API error {resp.status_code}: {resp.text[:200]}")
