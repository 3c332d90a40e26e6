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
import logging
import os
from typing import Optional

import aiohttp
from yarl import URL

from config import Config, ConfigurationLoadError
from connection import Connection
from credential_exchange import CredentialExchange
from errors import CryptoError
from logger import setup_logging
from messages import Packet
from public_keys import PublicKeyRegistry
from web_session import WebSession


class WebClient:
    """
    owns the http session and the web session of one CM connection
    """

    def __init__(self, config: Config, connection: Connection, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._config = config
        self._connection = connection
        self._loop = loop
        self._http: Optional[aiohttp.ClientSession] = None
        self._registry = PublicKeyRegistry(config.public_keys)
        self.web: Optional[WebSession] = None

    @property
    def registry(self) -> PublicKeyRegistry:
        return self._registry

    def handle_packet(self, packet: Packet) -> None:
        if self.web is None:
            logging.debug(f"Dropping {packet.emsg!r}, web client not started")
            return
        self.web.handle_packet(packet)

    def log_on(self) -> None:
        self.web.log_on()

    def cookie_jar(self) -> aiohttp.CookieJar:
        jar = aiohttp.CookieJar()
        domain = self._config.config["web"]["cookie_domain"]
        jar.update_cookies(self.web.cookies(), response_url=URL(f"https://{domain}/"))
        return jar

    async def __aenter__(self):
        web_config = self._config.config["web"]
        self._http = aiohttp.ClientSession()
        exchange = CredentialExchange(
            self._http,
            web_config["authenticate_url"],
            web_config.get("request_timeout"),
        )
        self.web = WebSession(self._connection, exchange, self._registry, self._config.universe, self._loop)
        logging.debug("Started web client")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.web is not None:
            await self.web.close()
        if self._http is not None:
            await self._http.close()
            self._http = None
        logging.debug("Closed web client")


async def main():
    logging.info("Checking steam web auth configuration ...")

    config = Config(os.environ.get("STEAM_WEB_AUTH_CONFIG", "./config.toml"))

    try:
        await config.initialize()
        registry = PublicKeyRegistry(config.public_keys)
        key = registry.get(config.universe)
    except ConfigurationLoadError:
        logging.error("Could not load configuration. Exiting")
        return 1
    except CryptoError as e:
        logging.exception(e)
        logging.error(f"No usable public key for universe {config.universe.name}. Exiting")
        return 1

    logging.info(f"Universe {config.universe.name} uses a {key.key_size} bit public key")
    logging.info(f"Authenticating against {config.config['web']['authenticate_url']}")
    return 0


def run():
    setup_logging()
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
