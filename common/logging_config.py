import logging
import os
import re
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MASK = '***MASKED***'

# key=value / "key": "value" pairs whose value must never reach a log
_MASKED_KEYS = ('password', 'token', 'secret', 'authorization')


def _key_value_pattern(key: str) -> re.Pattern:
    return re.compile(rf'({key}["\']?\s*[:=]\s*["\']?)([^"\'}}\s,]+)', re.IGNORECASE)


class SensitiveDataFilter(logging.Filter):
    """
    Masks credentials and signed tokens in log records.

    Covers key/value pairs, bearer credentials and share-link paths
    (/shared/<token>), where the token itself grants access to a file.
    """

    PATTERNS = [
        (re.compile(r'(bearer\s+)([^\s,}\'"]+)', re.IGNORECASE), rf'\1{MASK}'),
        (re.compile(r'(/shared/)([^/\s?#"\']+)'), rf'\1{MASK}'),
    ] + [(_key_value_pattern(key), rf'\1{MASK}') for key in _MASKED_KEYS]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.mask(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self.mask(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self.mask(arg) for arg in record.args)

        return True

    @classmethod
    def mask(cls, value):
        if not isinstance(value, str):
            return value
        for pattern, replacement in cls.PATTERNS:
            value = pattern.sub(replacement, value)
        return value


def _build_handler(log_file: Optional[Union[str, Path]]) -> logging.Handler:
    if log_file is None:
        return logging.StreamHandler(sys.stdout)

    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding='utf-8')


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure the logger of a top-level component.

    Module loggers obtained with get_logger(__name__) inside the component
    inherit the handler installed here.

    Args:
        component_name: Logger namespace to configure (e.g., 'fileshare', 'cli')
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL env var or INFO
        log_file: Write to this file instead of stdout

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = _build_handler(log_file)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
