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
from typing import Optional

from voluptuous import Schema, Required, Optional as SchemaOptional, All, Range, Coerce
import voluptuous.error

from errors import MessageDecodeError


class EMsg(enum.IntEnum):
    ClientNewLoginKey = 5463
    ClientNewLoginKeyAccepted = 5464
    ClientRequestWebAPIAuthenticateUserNonce = 5585
    ClientRequestWebAPIAuthenticateUserNonceResponse = 5586


@dataclasses.dataclass(frozen=True)
class Packet:
    """
    an already decoded protocol message; body holds the message fields by name
    """
    emsg: EMsg
    body: dict = dataclasses.field(default_factory=dict)


UINT32 = All(Coerce(int), Range(min=0, max=0xFFFFFFFF))


@dataclasses.dataclass(frozen=True)
class NewLoginKey:
    unique_id: int
    login_key: Optional[str] = None

    schema = Schema({
        Required('unique_id'): UINT32,
        SchemaOptional('login_key'): str,
    }, extra=voluptuous.REMOVE_EXTRA)


@dataclasses.dataclass(frozen=True)
class NewLoginKeyAccepted:
    unique_id: int


@dataclasses.dataclass(frozen=True)
class RequestWebAPIAuthenticateUserNonce:
    pass


@dataclasses.dataclass(frozen=True)
class RequestWebAPIAuthenticateUserNonceResponse:
    webapi_authenticate_user_nonce: str

    schema = Schema({
        Required('webapi_authenticate_user_nonce'): str,
    }, extra=voluptuous.REMOVE_EXTRA)


_EMSG_BY_MESSAGE = {
    NewLoginKey: EMsg.ClientNewLoginKey,
    NewLoginKeyAccepted: EMsg.ClientNewLoginKeyAccepted,
    RequestWebAPIAuthenticateUserNonce: EMsg.ClientRequestWebAPIAuthenticateUserNonce,
    RequestWebAPIAuthenticateUserNonceResponse: EMsg.ClientRequestWebAPIAuthenticateUserNonceResponse,
}


def read_message(packet: Packet, message_type):
    """
    validate a packet body against the message schema and build the message

    raises MessageDecodeError when the packet is of another kind or the body is malformed
    """
    expected = _EMSG_BY_MESSAGE[message_type]
    if packet.emsg != expected:
        raise MessageDecodeError(f"expected {expected.name}, got {packet.emsg!r}")
    if not isinstance(packet.body, dict):
        raise MessageDecodeError(f"{expected.name} body is not a mapping")
    try:
        fields = message_type.schema(packet.body)
    except voluptuous.error.Invalid as e:
        raise MessageDecodeError(f"malformed {expected.name}: {e}") from e
    return message_type(**fields)


def new_message(message) -> Packet:
    return Packet(_EMSG_BY_MESSAGE[type(message)], dataclasses.asdict(message))
