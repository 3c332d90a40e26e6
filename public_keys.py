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

import binascii
import enum
import logging
import threading
from typing import Dict, Optional, Union

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.serialization import load_der_public_key

from errors import CryptoError


class EUniverse(enum.IntEnum):
    Invalid = 0
    Public = 1
    Beta = 2
    Internal = 3
    Dev = 4


# DER encoded, hex
BUILTIN_PUBLIC_KEYS = {
    EUniverse.Public: (
        "30819D300D06092A864886F70D010101050003818B0030818702818100DFEC1AD62C10662C17353A14B07C5911"
        "7F9DD3D82B7AE3E015CD191E46E87B8774A2184631A9031479828EE945A24912A923687389CF69A1B16146BDC1"
        "BEBFD6011BD881D4DC90FBFE4F527366CB9570D7C58EBA1C7A3375A1623446BB60B78068FA13A77A8A374B9EC6"
        "F45D5F3A99F99EC43AE963A2BB881928E0E714C04289020111"
    ),
}


class PublicKeyRegistry:
    """
    universe -> rsa public key; keys are parsed on first use
    """

    def __init__(self, keys: Optional[Dict[EUniverse, Union[str, bytes]]] = None, include_builtin: bool = True):
        self._der: Dict[EUniverse, bytes] = {}
        self._loaded: Dict[EUniverse, RSAPublicKey] = {}
        self._lock = threading.Lock()
        if include_builtin:
            for universe, key in BUILTIN_PUBLIC_KEYS.items():
                self.register(universe, key)
        for universe, key in (keys or {}).items():
            self.register(universe, key)

    def register(self, universe: EUniverse, key: Union[str, bytes, RSAPublicKey]) -> None:
        universe = EUniverse(universe)
        with self._lock:
            self._loaded.pop(universe, None)
            if isinstance(key, RSAPublicKey):
                self._loaded[universe] = key
                self._der.pop(universe, None)
                return
            if isinstance(key, str):
                try:
                    key = binascii.unhexlify(key)
                except binascii.Error as e:
                    raise CryptoError(f"public key for {universe.name} is not valid hex") from e
            self._der[universe] = bytes(key)
        logging.debug(f"Registered public key for universe {universe.name}")

    def get(self, universe: EUniverse) -> RSAPublicKey:
        universe = EUniverse(universe)
        with self._lock:
            if universe in self._loaded:
                return self._loaded[universe]
            if universe not in self._der:
                raise CryptoError(f"no public key for universe {universe.name}")
            try:
                key = load_der_public_key(self._der[universe])
            except ValueError as e:
                raise CryptoError(f"public key for universe {universe.name} could not be loaded") from e
            if not isinstance(key, RSAPublicKey):
                raise CryptoError(f"public key for universe {universe.name} is not an RSA key")
            self._loaded[universe] = key
            return key

    def __contains__(self, universe) -> bool:
        return universe in self._der or universe in self._loaded
