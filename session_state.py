"""
SteamWebAuth
Copyright (C) 2024 thiccaxe

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

import dataclasses
import enum
import logging
import threading
from typing import Optional


class AtomicFlag:
    """
    boolean shared between packet dispatch and the log on task

    every read-modify-write goes through compare_and_swap
    """

    def __init__(self, value: bool = False):
        self._value = bool(value)
        self._lock = threading.Lock()

    def compare_and_swap(self, expected: bool, new: bool) -> bool:
        with self._lock:
            if self._value is not bool(expected):
                return False
            self._value = bool(new)
            return True

    def set(self) -> None:
        with self._lock:
            self._value = True

    def is_set(self) -> bool:
        with self._lock:
            return self._value


class LogOnState(enum.Enum):
    IDLE = "idle"  # no web login key yet
    READY = "ready"
    ATTEMPTING = "attempting"
    AUTHENTICATED = "authenticated"
    STALE_SECRET_PENDING = "stale_secret_pending"
    FAILED = "failed"


class LogOnTrigger(enum.Enum):
    SECRET_DELIVERED = "secret_delivered"
    ATTEMPT_STARTED = "attempt_started"
    SUCCEEDED = "succeeded"
    SECRET_STALE = "secret_stale"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


_S = LogOnState
_T = LogOnTrigger

TRANSITIONS = {
    (_S.IDLE, _T.SECRET_DELIVERED): _S.READY,

    (_S.READY, _T.SECRET_DELIVERED): _S.READY,
    (_S.READY, _T.ATTEMPT_STARTED): _S.ATTEMPTING,

    (_S.ATTEMPTING, _T.SUCCEEDED): _S.AUTHENTICATED,
    (_S.ATTEMPTING, _T.SECRET_STALE): _S.STALE_SECRET_PENDING,
    (_S.ATTEMPTING, _T.EXHAUSTED): _S.FAILED,
    # sequence cancelled with the connection; the key is still usable
    (_S.ATTEMPTING, _T.CANCELLED): _S.READY,
    # key refreshed by the server while a request is in flight
    (_S.ATTEMPTING, _T.SECRET_DELIVERED): _S.ATTEMPTING,

    # the requested key arrived; the retry is started right after
    (_S.STALE_SECRET_PENDING, _T.SECRET_DELIVERED): _S.READY,
    # manual log on with the old key while waiting
    (_S.STALE_SECRET_PENDING, _T.ATTEMPT_STARTED): _S.ATTEMPTING,

    (_S.AUTHENTICATED, _T.SECRET_DELIVERED): _S.AUTHENTICATED,
    (_S.AUTHENTICATED, _T.ATTEMPT_STARTED): _S.ATTEMPTING,

    (_S.FAILED, _T.SECRET_DELIVERED): _S.READY,
    (_S.FAILED, _T.ATTEMPT_STARTED): _S.ATTEMPTING,
}


class InvalidTransition(Exception): pass


@dataclasses.dataclass
class SessionState:
    """
    per connection web session record, discarded with the connection
    """
    web_login_key: str = ""
    session_id: str = ""
    steam_login: str = ""
    steam_login_secure: str = ""
    relog_on_pending: AtomicFlag = dataclasses.field(default_factory=AtomicFlag)
    state: LogOnState = LogOnState.IDLE
    last_error: Optional[Exception] = None

    def transition(self, trigger: LogOnTrigger) -> LogOnState:
        next_state = TRANSITIONS.get((self.state, trigger))
        if next_state is None:
            raise InvalidTransition(f"{trigger.name} is not valid in state {self.state.name}")
        if next_state is not self.state:
            logging.debug(f"web session {self.state.name} -> {next_state.name} ({trigger.name})")
        self.state = next_state
        return next_state

    def set_credentials(self, token: str, token_secure: str) -> None:
        # always replaced as a pair
        self.steam_login, self.steam_login_secure = token, token_secure

    @property
    def authenticated(self) -> bool:
        return bool(self.steam_login) and bool(self.steam_login_secure)
