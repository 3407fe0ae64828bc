"""In-memory one-time-password sessions for the mock login flow."""
import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from ..utils.generators import random_token

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300


@dataclass
class OTPSession:
    code: str
    expires: float


def generate_otp() -> str:
    return str(random.randint(100000, 999999))


class OTPStore:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, OTPSession] = {}

    def __len__(self):
        return len(self._sessions)

    def _purge_expired(self):
        now = self._clock()
        for session_id in [k for k, s in self._sessions.items() if now > s.expires]:
            del self._sessions[session_id]

    def create_session(self, expires_in: int = DEFAULT_TTL) -> Tuple[str, int]:
        session_id = f"session_{int(self._clock() * 1000)}_{random_token(8)}"
        with self._lock:
            self._purge_expired()
            self._sessions[session_id] = OTPSession(generate_otp(), self._clock() + expires_in)
        return session_id, expires_in

    def code_for(self, session_id: str) -> Optional[str]:
        session = self._sessions.get(session_id)
        return session.code if session else None

    def verify(self, session_id: str, code: str) -> Tuple[bool, Optional[str]]:
        """Returns ``(valid, reason)``; expired and successfully verified sessions are removed."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False, "Invalid or expired session"
            if self._clock() > session.expires:
                del self._sessions[session_id]
                return False, "OTP has expired"
            if session.code != str(code):
                return False, "Invalid OTP"
            del self._sessions[session_id]
            return True, None


otp_store = OTPStore()


def create_otp_session(expires_in: int = DEFAULT_TTL) -> Tuple[str, int]:
    return otp_store.create_session(expires_in)


def verify_otp(session_id: str, code: str) -> Tuple[bool, Optional[str]]:
    return otp_store.verify(session_id, code)
