# backoffice/core/logging.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once at application start.

    Library loggers that are noisy at INFO (SQL echo, access logs) are
    kept at WARNING unless the app itself runs at DEBUG.
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    if level.upper() != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
