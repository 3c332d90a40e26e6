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
import logging
from pathlib import Path
from typing import Dict

from voluptuous import Schema, Required, Optional, Any, All, Range, Length, In, Url
import voluptuous.error
import aiofiles
import tomlkit
import tomlkit.exceptions

from credential_exchange import AUTHENTICATE_USER_URL
from public_keys import EUniverse


class ConfigurationLoadError(Exception): pass


DEFAULT_COOKIE_DOMAIN = "steamcommunity.com"


class Config:
    config: dict
    config_opened: bool = False

    def __init__(self, config_location: Path):
        self.config_location = config_location

        self.config_schema = Schema({
            Optional('web', default={}): {
                Optional('authenticate_url', default=AUTHENTICATE_USER_URL): All(str, Url()),
                Optional('request_timeout'): Any(None, All(Any(int, float), Range(min=0, min_included=False))),
                Optional('universe', default=EUniverse.Public.name): In([u.name for u in EUniverse]),
                Optional('cookie_domain', default=DEFAULT_COOKIE_DOMAIN): All(str, Length(min=1)),
            },
            Optional('public_keys', default={}): {
                In([u.name for u in EUniverse]): All(str, Length(min=2), self.key_validator),
            },
        })

    @staticmethod
    def key_validator(public_key: str) -> str:
        try:
            binascii.unhexlify(public_key)
        except binascii.Error as e:
            logging.exception(e)
            raise voluptuous.error.Invalid(message="Invalid key.") from e
        return public_key

    async def initialize(self):
        try:
            async with aiofiles.open(self.config_location, 'r') as config_file:
                file_data = await config_file.read()
                document = tomlkit.parse(file_data)
                logging.debug("Loaded Configuration without toml format error")
                logging.debug("Validating against Schema.")
                self.config = self.config_schema(document.unwrap())
                self.config_opened = True
                logging.debug("Validated against Schema.")
        except FileNotFoundError as e:
            logging.exception(e)
            logging.warning(
                f"Could not find {self.config_location}. Copy from .example/config.toml to {self.config_location}")
            raise ConfigurationLoadError() from e
        except IOError as e:
            logging.exception(e)
            logging.warning(f"Could not open file {self.config_location}")
            raise ConfigurationLoadError() from e
        except tomlkit.exceptions.ParseError as e:
            logging.exception(e)
            logging.warning(f"Configuration in {self.config_location} is invalid")
            raise ConfigurationLoadError() from e
        except voluptuous.error.MultipleInvalid as e:
            logging.exception(e)
            logging.warning(f"Configuration in {self.config_location} does not match expected format")
            logging.warning(f"Issue configuration item: {e.path}")
            raise ConfigurationLoadError() from e

        logging.info(f"Configuration loaded.")

    @property
    def universe(self) -> EUniverse:
        return EUniverse[self.config["web"]["universe"]]

    @property
    def public_keys(self) -> Dict[EUniverse, str]:
        return {EUniverse[name]: key for name, key in self.config["public_keys"].items()}
