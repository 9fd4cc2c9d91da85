"""Logging setup for the API process."""
import logging
import sys

from pythonjsonlogger import jsonlogger

from travel_expense.core.config import settings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging() -> None:
    """One JSON object per line in production; plain text everywhere else.

    SQL echo is left to the engine (``echo`` in development), so the
    sqlalchemy loggers stay at WARNING here.
    """
    if settings.APP_ENV == "production":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            jsonlogger.JsonFormatter(
                LOG_FORMAT,
                rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
            )
        )
        logging.root.handlers = [handler]
        logging.root.setLevel(logging.INFO)
    else:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("travel_expense").setLevel(logging.INFO)
