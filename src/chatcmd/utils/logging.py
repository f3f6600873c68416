"""Logging configuration for chat-cmd."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from chatcmd.utils.config import Config


def setup_logging(config: Config, console_output: bool = False) -> None:
    """
    Send chat-cmd log records to a rotating file in the workspace.

    With ``console_output`` INFO and above are echoed to stdout as well.
    """
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_formatter = logging.Formatter("%(levelname)s - %(name)s - %(message)s")

    root_logger = logging.getLogger("chatcmd")
    root_logger.setLevel(logging.DEBUG)

    config.logging_path.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        config.logging_path / "chatcmd.log", maxBytes=1_000_000, backupCount=3
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(logging.INFO)
        root_logger.addHandler(console_handler)
