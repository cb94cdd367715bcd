import logging
import logging.handlers
import sys
from pathlib import Path
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that stamps standard fields on every log entry.
    """
    def add_fields(self, log_record, record, message_dict):
        """
        Called for every log entry to add custom fields.

        Args:
            log_record: The dict that will become JSON (we modify this)
            record: The original LogRecord object (has all log info)
            message_dict: The message and any 'extra' fields
        """
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        log_record['timestamp'] = record.created
        log_record['level'] = record.levelname
        log_record['logger'] = record.name        # e.g. 'services.webhook_service'
        log_record['module'] = record.module
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno
        # set by RequestIDMiddleware; absent for background work and startup
        log_record['request_id'] = getattr(record, 'request_id', None)


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):
    """
    Configure application-wide logging.

    Console output is human readable and honours log_level. Two rotating JSON
    files are written under log_dir: app.log (everything) and error.log
    (ERROR and above), so webhook failures and item materialization problems
    can be grepped without the noise.

    Args:
        log_level: Minimum console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory where log files will be stored
    """
    log_path = Path(log_dir)
    log_path.mkdir(exist_ok=True)

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    json_formatter = CustomJsonFormatter(
        '%(timestamp)s %(level)s %(logger)s %(message)s'
    )

    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers do the filtering

    # setup_logging may run more than once (tests, reloads)
    root_logger.handlers.clear()

    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_path / "app.log", logging.DEBUG, json_formatter))
    root_logger.addHandler(_rotating_handler(log_path / "error.log", logging.ERROR, json_formatter))

    # Silence noisy third-party loggers
    for noisy in (
        "uvicorn", "uvicorn.access", "uvicorn.error",
        "sqlalchemy.engine",
        "python_multipart.multipart",
        "passlib.handlers.bcrypt",
        "PIL",
        "urllib3",
    ):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root_logger.info(
        "Logging configured",
        extra={
            "log_level": log_level,
            "log_dir": str(log_path.absolute())
        }
    )



def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Configured logger
    """
    return logging.getLogger(name)
