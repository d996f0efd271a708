"""Console logging for the basil2yaml commands.

Diagnostics go to stderr so that combined YAML on stdout stays clean.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from basil_config import LOG_LEVEL


def setup_logging(log_level: str | None = None) -> None:
    level = (log_level or LOG_LEVEL).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
