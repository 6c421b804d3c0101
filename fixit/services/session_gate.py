# fil: fixit/services/session_gate.py

from __future__ import annotations

import hmac
import secrets
import threading
import time
from typing import Callable, Dict, Optional

from fixit.core.errors import Unauthenticated


class SessionGate:
    """
    Inloggning för admin-delen.

    Varje webbläsarsession har ett eget slumpat id (cookie). Här sparas bara
    de id:n som är inloggade, med en utgångstid:

        Anonymous --authenticate()--> Authenticated --end_session()/utgång--> Anonymous

    Ett enda delat konto (ADMIN_USERNAME/ADMIN_PASSWORD). Är inget konfigurerat
    kan ingen logga in.
    """

    def __init__(
        self,
        username: str,
        password: str,
        *,
        ttl_seconds: float = 8 * 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._username = username or ""
        self._password = password or ""
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(32)

    @property
    def configured(self) -> bool:
        return bool(self._username and self._password)

    def _credentials_match(self, username: str, password: str) -> bool:
        if not self.configured:
            return False
        user_ok = hmac.compare_digest((username or "").encode("utf-8"), self._username.encode("utf-8"))
        pass_ok = hmac.compare_digest((password or "").encode("utf-8"), self._password.encode("utf-8"))
        return user_ok and pass_ok

    def authenticate(self, session_id: str, username: str, password: str) -> bool:
        if not session_id or not self._credentials_match(username, password):
            return False
        with self._lock:
            now = self._clock()
            # städa bort utgångna sessioner som aldrig kollades igen
            for sid in [s for s, expires in self._sessions.items() if now >= expires]:
                del self._sessions[sid]
            self._sessions[session_id] = now + self._ttl
        return True

    def is_authenticated(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        with self._lock:
            expires = self._sessions.get(session_id)
            if expires is None:
                return False
            if self._clock() >= expires:
                del self._sessions[session_id]
                return False
            return True

    def require_authenticated(self, session_id: Optional[str]) -> None:
        if not self.is_authenticated(session_id):
            raise Unauthenticated("Login required")

    def end_session(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        with self._lock:
            self._sessions.pop(session_id, None)
