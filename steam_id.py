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

import enum

from public_keys import EUniverse


class EAccountType(enum.IntEnum):
    Invalid = 0
    Individual = 1
    Multiseat = 2
    GameServer = 3
    AnonGameServer = 4
    Pending = 5
    ContentServer = 6
    Clan = 7
    Chat = 8
    ConsoleUser = 9
    AnonUser = 10


# steam3 id chars
ACCOUNT_TYPE_CHARS = {
    EAccountType.AnonGameServer: 'A',
    EAccountType.GameServer: 'G',
    EAccountType.Multiseat: 'M',
    EAccountType.Pending: 'P',
    EAccountType.ContentServer: 'C',
    EAccountType.Clan: 'g',
    EAccountType.Chat: 'T',
    EAccountType.Invalid: 'I',
    EAccountType.Individual: 'U',
    EAccountType.AnonUser: 'a',
}

DESKTOP_INSTANCE = 1


class SteamID:
    """
    64 bit account identifier

    bits 0-31 account id, 32-51 instance, 52-55 account type, 56-63 universe
    """

    def __init__(self, value: int = 0):
        if not 0 <= int(value) <= 0xFFFFFFFFFFFFFFFF:
            raise ValueError(f"SteamID out of range: {value}")
        self._value = int(value)

    @staticmethod
    def create(account_id: int, universe: EUniverse = EUniverse.Public,
               account_type: EAccountType = EAccountType.Individual,
               instance: int = DESKTOP_INSTANCE) -> "SteamID":
        if not 0 <= account_id <= 0xFFFFFFFF:
            raise ValueError(f"account id out of range: {account_id}")
        if not 0 <= instance <= 0xFFFFF:
            raise ValueError(f"instance out of range: {instance}")
        return SteamID(
            (int(universe) << 56)
            | (int(account_type) << 52)
            | (instance << 32)
            | account_id
        )

    @property
    def account_id(self) -> int:
        return self._value & 0xFFFFFFFF

    @property
    def instance(self) -> int:
        return (self._value >> 32) & 0xFFFFF

    @property
    def account_type(self) -> EAccountType:
        return EAccountType((self._value >> 52) & 0xF)

    @property
    def universe(self) -> EUniverse:
        return EUniverse((self._value >> 56) & 0xFF)

    def format_string(self) -> str:
        return str(self._value)

    def steam3(self) -> str:
        type_char = ACCOUNT_TYPE_CHARS.get(self.account_type, 'i')
        return f"[{type_char}:{int(self.universe)}:{self.account_id}]"

    def __int__(self):
        return self._value

    def __eq__(self, other):
        if isinstance(other, SteamID):
            return self._value == other._value
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __str__(self):
        return self.format_string()

    def __repr__(self):
        return f"SteamID({self._value}, {self.steam3()})"
