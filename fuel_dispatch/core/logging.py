import logging
import sys
from pythonjsonlogger import jsonlogger

from fuel_dispatch.core.environment import get_log_level

# Libraries whose INFO output is per-statement or per-request noise
QUIET_LOGGERS = ("sqlalchemy.engine", "asyncpg", "aiosqlite", "httpx", "uvicorn.access")


def setup_logging():
    """
    Configures centralized JSON logging on stdout.

    Every record is one JSON object; `extra=` fields passed by the engine
    (assignment_id, truck_id, total_remaining, ...) become top-level keys.
    """
    level = get_log_level()
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Reconfiguring must not stack handlers (uvicorn reload, test imports)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        fmt='%(asctime)s %(levelname)s %(name)s %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%SZ'
    )
    log_handler.setFormatter(formatter)
    root_logger.addHandler(log_handler)

    logging.getLogger("fuel_dispatch").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info("Logging infrastructure initialized successfully.", extra={"log_level": level})
