import os
import logging
from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install

# ignore errors from these libs
import aiohttp, tomlkit

console = Console()


def log_level() -> str:
    return os.environ.get("STEAM_WEB_AUTH_LOGLEVEL", os.environ.get("LOGLEVEL", "INFO")).upper()


def setup_logging():
    FORMAT = "%(message)s"
    logging_handler = RichHandler(
        level=log_level(),
        console=console,
        rich_tracebacks=True,
        tracebacks_suppress=[aiohttp, tomlkit]
    )

    logging.basicConfig(
        level="NOTSET", format=FORMAT, datefmt="[%X]", handlers=[logging_handler]
    )
    # request lines from aiohttp are noise here
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    install(
        console = console
    )
    return logging_handler
