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

import asyncio
import base64
import logging
from typing import Optional, Set

from connection import Connection
from credential_exchange import CredentialExchange, ExchangeOutcome
from errors import ConfigurationError, HARD_ERRORS, MessageDecodeError
from events import WebLoggedOnEvent, WebLogOnErrorEvent, WebSessionIDEvent
from messages import (
    EMsg,
    NewLoginKey,
    NewLoginKeyAccepted,
    Packet,
    RequestWebAPIAuthenticateUserNonce,
    RequestWebAPIAuthenticateUserNonceResponse,
    new_message,
    read_message,
)
from public_keys import EUniverse, PublicKeyRegistry
from session_state import LogOnState, LogOnTrigger, SessionState
from web_handshake import build_payload

# attempts per log_on() call, run back to back with no delay
MAX_LOG_ON_ATTEMPTS = 3


class WebSession:
    """
    Fetches the steam web cookies for a logged on CM connection.

    The web login key arrives over the CM connection and is exchanged for `steamLogin`
    and `steamLoginSecure` through ISteamUserAuth/AuthenticateUser. When the server
    rejects the key (401) a new one is requested, and the exchange is retried once it
    is delivered.
    """

    def __init__(self, connection: Connection, exchange: CredentialExchange, registry: PublicKeyRegistry,
                 universe: EUniverse = EUniverse.Public, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._connection = connection
        self._exchange = exchange
        self._registry = registry
        self._universe = universe
        self._loop = loop
        self._state = SessionState()
        self._tasks: Set[asyncio.Task] = set()
        self._log_on_task: Optional[asyncio.Task] = None
        self._packet_handlers = {
            EMsg.ClientNewLoginKey: self._handle_new_login_key,
            EMsg.ClientRequestWebAPIAuthenticateUserNonceResponse: self._handle_auth_nonce_response,
        }

    @property
    def session_id(self) -> str:
        return self._state.session_id

    @property
    def steam_login(self) -> str:
        return self._state.steam_login

    @property
    def steam_login_secure(self) -> str:
        return self._state.steam_login_secure

    @property
    def state(self) -> LogOnState:
        return self._state.state

    @property
    def relog_on_pending(self) -> bool:
        return self._state.relog_on_pending.is_set()

    @property
    def log_on_in_progress(self) -> bool:
        return self._log_on_task is not None and not self._log_on_task.done()

    def cookies(self) -> dict:
        cookies = {
            "sessionid": self._state.session_id,
            "steamLogin": self._state.steam_login,
            "steamLoginSecure": self._state.steam_login_secure,
        }
        return {name: value for name, value in cookies.items() if value}

    def handle_packet(self, packet: Packet) -> None:
        packet_handler = self._packet_handlers.get(packet.emsg)
        if packet_handler is not None:
            packet_handler(packet)

    def log_on(self) -> None:
        """
        start fetching the web cookies; returns before any request is made

        raises ConfigurationError if no web login key was delivered yet.
        the outcome is published as WebLoggedOnEvent or WebLogOnErrorEvent
        """
        if not self._state.web_login_key:
            raise ConfigurationError("session not initialized")

        if self.log_on_in_progress:
            logging.debug("web log on already in progress")
            return

        loop = self._loop or asyncio.get_running_loop()
        self._state.transition(LogOnTrigger.ATTEMPT_STARTED)
        task = loop.create_task(self._log_on_sequence())
        self._log_on_task = task
        self._tasks.add(task)
        task.add_done_callback(self._log_on_done)

    def _log_on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            if self._state.state is LogOnState.ATTEMPTING:
                self._state.transition(LogOnTrigger.CANCELLED)
            return
        error = task.exception()
        if error is not None:
            logging.error("web log on task crashed", exc_info=error)
            self._connection.errorf("web: error logging on: %s", error)
            if self._state.state is LogOnState.ATTEMPTING:
                self._state.last_error = error
                self._state.transition(LogOnTrigger.EXHAUSTED)
                self._connection.emit(WebLogOnErrorEvent(error))

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self._log_on_task = None

    async def _log_on_sequence(self) -> None:
        error: Optional[Exception] = None
        for attempt in range(1, MAX_LOG_ON_ATTEMPTS + 1):
            try:
                await self._api_log_on()
                return
            except HARD_ERRORS as e:
                error = e
                logging.warning(f"web log on attempt {attempt}/{MAX_LOG_ON_ATTEMPTS} failed: {e!r}")

        self._state.last_error = error
        self._state.transition(LogOnTrigger.EXHAUSTED)
        self._connection.emit(WebLogOnErrorEvent(error))

    async def _api_log_on(self) -> None:
        payload = build_payload(self._state.web_login_key, self._registry, self._universe)
        result = await self._exchange.redeem(self._connection.steam_id(), payload)

        if result.outcome is ExchangeOutcome.STALE_SECRET:
            self._state.transition(LogOnTrigger.SECRET_STALE)
            self._state.relog_on_pending.set()
            logging.info("web login key expired, requesting a new one")
            self._connection.write(new_message(RequestWebAPIAuthenticateUserNonce()))
            return

        self._state.set_credentials(result.credentials.token, result.credentials.token_secure)
        self._state.last_error = None
        self._state.transition(LogOnTrigger.SUCCEEDED)
        logging.info("web log on succeeded")
        self._connection.emit(WebLoggedOnEvent())

    def _handle_new_login_key(self, packet: Packet) -> None:
        try:
            msg = read_message(packet, NewLoginKey)
        except MessageDecodeError as e:
            self._connection.errorf("web: error reading message: %s", e)
            return

        self._connection.write(new_message(NewLoginKeyAccepted(unique_id=msg.unique_id)))

        # number -> string -> bytes -> base64
        self._state.session_id = base64.b64encode(str(msg.unique_id).encode("utf-8")).decode("ascii")
        logging.debug("web session id set")

        self._connection.emit(WebSessionIDEvent())

    def _handle_auth_nonce_response(self, packet: Packet) -> None:
        try:
            msg = read_message(packet, RequestWebAPIAuthenticateUserNonceResponse)
        except MessageDecodeError as e:
            self._connection.errorf("web: error reading message: %s", e)
            return

        self._state.web_login_key = msg.webapi_authenticate_user_nonce
        self._state.transition(LogOnTrigger.SECRET_DELIVERED)

        # retry only when the key was requested after a 401
        if self._state.relog_on_pending.compare_and_swap(True, False):
            try:
                self.log_on()
            except ConfigurationError as e:
                self._connection.errorf("web: error logging on: %s", e)
