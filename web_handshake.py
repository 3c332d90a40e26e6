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
import logging
import secrets

import cryptography.exceptions

from cryptoutil.rsa import rsa_encrypt
from cryptoutil.symmetric import symmetric_encrypt
from errors import ConfigurationError, CryptoError
from public_keys import EUniverse, PublicKeyRegistry

SESSION_KEY_LENGTH = 32


@dataclasses.dataclass(frozen=True)
class HandshakePayload:
    encrypted_session_key: bytes
    encrypted_login_key: bytes


def generate_session_key() -> bytes:
    try:
        return secrets.token_bytes(SESSION_KEY_LENGTH)
    except OSError as e:
        raise CryptoError("could not generate session key") from e


def build_payload(login_key: str, registry: PublicKeyRegistry,
                  universe: EUniverse = EUniverse.Public) -> HandshakePayload:
    """
    encrypt the web login key for AuthenticateUser

    a fresh session key is generated on every call and never kept
    """
    if not login_key:
        raise ConfigurationError("session not initialized")

    public_key = registry.get(universe)
    session_key = generate_session_key()

    try:
        encrypted_session_key = rsa_encrypt(public_key, session_key)
    except (ValueError, TypeError, cryptography.exceptions.UnsupportedAlgorithm) as e:
        raise CryptoError("could not encrypt session key") from e

    try:
        encrypted_login_key = symmetric_encrypt(session_key, login_key.encode("utf-8"))
    except (ValueError, TypeError, cryptography.exceptions.UnsupportedAlgorithm) as e:
        raise CryptoError("could not encrypt login key") from e

    logging.debug(f"Built handshake payload for universe {universe.name} "
                  f"({len(encrypted_session_key)} + {len(encrypted_login_key)} bytes)")

    return HandshakePayload(encrypted_session_key, encrypted_login_key)
