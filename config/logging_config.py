import json
import logging
import sys
import traceback
from datetime import UTC, datetime
from decimal import Decimal
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config.settings import Settings


class CustomJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs one structured JSON document per record.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.now(tz=UTC).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if hasattr(record, 'extra_data'):
            log_entry['data'] = record.extra_data

        return json.dumps(log_entry, ensure_ascii=False, cls=CustomJSONEncoder)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
        datefmt='%H:%M:%S'
    ))
    return handler


def _file_handler(log_dir: Path, max_file_size: int, backup_count: int) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=max_file_size,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(settings: Settings,
                  max_file_size: int = 10 * 1024 * 1024,
                  backup_count: int = 5) -> None:
    """Console output plus an optional rotating JSON log file under LOG_DIR."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    logging.getLogger("httpx").setLevel(logging.WARNING)

    console_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root_logger.addHandler(_console_handler(console_level))

    if settings.LOG_JSON_FILE:
        root_logger.addHandler(_file_handler(Path(settings.LOG_DIR), max_file_size, backup_count))
