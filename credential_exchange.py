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
import dataclasses
import enum
import json
import logging
from typing import Optional
from urllib.parse import urlencode

import aiohttp
from voluptuous import Schema, Required, All, Length
import voluptuous.error

from errors import NetworkError, ProtocolError
from steam_id import SteamID
from web_handshake import HandshakePayload

AUTHENTICATE_USER_URL = "https://api.steampowered.com/ISteamUserAuth/AuthenticateUser/v0001"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class ExchangeOutcome(enum.Enum):
    SUCCESS = "success"
    STALE_SECRET = "stale_secret"


@dataclasses.dataclass(frozen=True)
class Credentials:
    token: str
    token_secure: str


@dataclasses.dataclass(frozen=True)
class ExchangeResult:
    outcome: ExchangeOutcome
    credentials: Optional[Credentials] = None


STALE_SECRET = ExchangeResult(ExchangeOutcome.STALE_SECRET)

# field names are matched case insensitively, like the reference json decoder
AUTHENTICATE_USER_SCHEMA = Schema({
    Required('authenticateuser'): Schema({
        Required('token'): All(str, Length(min=1)),
        Required('tokensecure'): All(str, Length(min=1)),
    }, extra=voluptuous.ALLOW_EXTRA),
}, extra=voluptuous.ALLOW_EXTRA)


def _lower_keys(obj):
    if isinstance(obj, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in obj.items()}
    return obj


def encode_form(steam_id: SteamID, payload: HandshakePayload) -> str:
    # raw ciphertext is percent-encoded as-is
    return urlencode([
        ("format", "json"),
        ("steamid", steam_id.format_string()),
        ("sessionkey", payload.encrypted_session_key),
        ("encrypted_loginkey", payload.encrypted_login_key),
    ])


def parse_credentials(body: bytes) -> Credentials:
    try:
        document = json.loads(body)
    except ValueError as e:
        raise ProtocolError("AuthenticateUser returned non-JSON data") from e
    try:
        document = AUTHENTICATE_USER_SCHEMA(_lower_keys(document))
    except voluptuous.error.Invalid as e:
        raise ProtocolError(f"AuthenticateUser response does not match expected format: {e}") from e
    result = document["authenticateuser"]
    return Credentials(result["token"], result["tokensecure"])


class CredentialExchange:
    """
    redeems an encrypted login key for the steamLogin / steamLoginSecure cookies
    """

    def __init__(self, http: aiohttp.ClientSession, url: str = AUTHENTICATE_USER_URL,
                 timeout: Optional[float] = None):
        self._http = http
        self._url = url
        # None -> no limit
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def redeem(self, steam_id: SteamID, payload: HandshakePayload) -> ExchangeResult:
        data = encode_form(steam_id, payload)
        try:
            async with self._http.post(
                    self._url,
                    data=data,
                    headers={"Content-Type": FORM_CONTENT_TYPE},
                    timeout=self._timeout,
            ) as response:
                status = response.status
                logging.debug(f"AuthenticateUser responded with {status}")

                if status == 401:  # web login key has expired
                    return STALE_SECRET

                if status != 200:
                    raise ProtocolError(f"request failed with status {status} {response.reason}")

                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"could not reach {self._url}: {e!r}") from e

        return ExchangeResult(ExchangeOutcome.SUCCESS, parse_credentials(body))
