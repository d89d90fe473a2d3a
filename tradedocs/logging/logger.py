import logging
import sys
from typing import TextIO


class Log:
    """Centralized logging for the ingestion service.

    Keyword arguments are appended to the message as ``key=value`` pairs in
    sorted order, so log lines stay grep-able per document or upload.
    """

    _logger: logging.Logger = logging.getLogger("tradedocs")

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Configure the logger with the specified level and a stream handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @staticmethod
    def _format(message: str, context: dict[str, object]) -> str:
        if not context:
            return message
        pairs = " ".join(f"{key}={context[key]}" for key in sorted(context))
        return f"{message} [{pairs}]"

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(cls._format(message, kwargs))

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(cls._format(message, kwargs))

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message with the active exception's traceback."""
        cls._logger.exception(cls._format(message, kwargs))

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(cls._format(message, kwargs))

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(cls._format(message, kwargs))
