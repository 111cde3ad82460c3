"""Centralized logging configuration."""

import logging


def configure_logging(level: int = logging.INFO):
    """
    Install one console format for the service and the libraries it drives.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Upstream HTTP traffic is logged by httpx and geopy; keep it in the same format
    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx", "fastapi", "geopy"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        # Don't propagate to avoid duplicate messages
        logger.propagate = False

        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
