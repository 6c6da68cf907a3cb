import json
import logging
import sys
from datetime import UTC, datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    raise TypeError(f'{type(value).__name__} is not JSON serializable')


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record. Whatever is passed as ``extra={'extra_data': ...}``
    ends up under ``data``.
    """

    RECORD_FIELDS = {
        'level': 'levelname',
        'logger': 'name',
        'module': 'module',
        'function': 'funcName',
        'line': 'lineno',
    }

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, UTC).isoformat(),
            'message': record.getMessage(),
        }
        entry.update({key: getattr(record, attr) for key, attr in self.RECORD_FIELDS.items()})

        if record.exc_info:
            exc_type, exc, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc),
                'traceback': self.formatException(record.exc_info),
            }

        data = getattr(record, 'extra_data', None)
        if data is not None:
            entry['data'] = data

        return json.dumps(entry, ensure_ascii=False, default=_json_default)


CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'


def setup_logging(level: str = "INFO",
                  json_format: bool = False,
                  log_file: str | None = None,
                  max_file_size: int = 10 * 1024 * 1024,
                  backup_count: int = 5) -> None:
    """
    Configure the root logger once at startup.

    Console output is human readable unless `json_format` is set; the optional
    rotating file always receives JSON records.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    console_handler = logging.StreamHandler(sys.stdout)
    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)
