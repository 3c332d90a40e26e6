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

import logging
from abc import ABC, abstractmethod

from messages import Packet
from steam_id import SteamID


class Connection(ABC):
    """
    what the web session needs from the CM connection that owns it

    packets are written already encoded, events are handed to whoever listens
    """

    @abstractmethod
    def write(self, packet: Packet) -> None:
        raise NotImplementedError

    @abstractmethod
    def emit(self, event) -> None:
        raise NotImplementedError

    @abstractmethod
    def steam_id(self) -> SteamID:
        raise NotImplementedError

    def errorf(self, fmt: str, *args) -> None:
        logging.error(fmt, *args)
