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


class WebSessionError(Exception): pass


class ConfigurationError(WebSessionError):
    """
    log_on() was called before a web login key was delivered
    """
    pass


class CryptoError(WebSessionError): pass


class NetworkError(WebSessionError): pass


class ProtocolError(WebSessionError):
    """
    unexpected status code, or a success body that could not be decoded
    """
    pass


class MessageDecodeError(WebSessionError): pass


# errors that abort one log on attempt and consume a retry
HARD_ERRORS = (ConfigurationError, CryptoError, NetworkError, ProtocolError)
