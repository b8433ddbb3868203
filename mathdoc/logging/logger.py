import logging
import sys


class Log:
    """Structured logging wrapper handed to each component."""

    ROOT_NAME = "mathdoc"

    def __init__(self, name: str = ROOT_NAME) -> None:
        self._logger = logging.getLogger(name)

    @classmethod
    def configure(cls, log_level: str) -> "Log":
        """Configure the root logger with the specified level and stdout handler."""
        log = cls()
        log._logger.setLevel(log_level.upper())
        if not log._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s %(message)s")
            )
            log._logger.addHandler(handler)
        return log

    @classmethod
    def for_component(cls, component: str) -> "Log":
        """Return a child logger of the root, e.g. ``mathdoc.jobs.poller``."""
        return cls(f"{cls.ROOT_NAME}.{component}")

    @property
    def name(self) -> str:
        return self._logger.name

    def info(self, message: str, **kwargs: object) -> None:
        """Log an info message."""
        self._logger.info(message, extra=kwargs)

    def error(self, message: str, **kwargs: object) -> None:
        """Log an error message."""
        self._logger.error(message, extra=kwargs)

    def warning(self, message: str, **kwargs: object) -> None:
        """Log a warning message."""
        self._logger.warning(message, extra=kwargs)

    def debug(self, message: str, **kwargs: object) -> None:
        """Log a debug message."""
        self._logger.debug(message, extra=kwargs)
