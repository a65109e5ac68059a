"""
Logging module

Every module logs through a child of the "gir_bindgen" logger so that the
command line can route filter decisions, preprocessor warnings, and
configuration errors to the console and, optionally, to a log file.
"""

from pathlib import Path
from typing import Optional
import logging

ROOT = 'gir_bindgen'

# Console lines carry the module, e.g. "[filter] DEBUG filtering type ..."
CONSOLE_FORMAT = '[%(module_name)s] %(levelname)s %(message)s'
FILE_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'


class _ModuleNameFilter(logging.Filter):
    """Adds the logger name relative to the root as module_name"""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(ROOT + '.'):
            name = name[len(ROOT) + 1:]
        record.module_name = name
        return True


def get_logger(module: str = '') -> logging.Logger:
    """Get the logger of a gir_bindgen module, or the root logger"""
    return logging.getLogger(f'{ROOT}.{module}' if module else ROOT)


def _handler(handler: logging.Handler, fmt: str, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(_ModuleNameFilter())
    return handler


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Route gir_bindgen logs to stderr and optionally a file

    Verbose mode lowers the level to DEBUG, which includes every filter
    decision. Calling this again replaces the previous handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    logger.addHandler(_handler(logging.StreamHandler(), CONSOLE_FORMAT, level))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding='utf-8'), FILE_FORMAT, level))

    return logger
