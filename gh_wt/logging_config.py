"""Logging configuration for gh-wt"""
import logging
import os
import sys
from pathlib import Path

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
SHORT_FORMAT = '[%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Loggers whose DEBUG output drowns ours unless --debug is given
NOISY_LOGGERS = ('git', 'github', 'urllib3')


class LevelColorFormatter(logging.Formatter):
    """Colors the level name when writing to a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, datefmt: str = None, use_color: bool = True, stream=None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        stream = stream or sys.stderr
        self.use_color = use_color and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if not (self.use_color and color):
            return super().format(record)
        # Copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_log_file() -> Path:
    """Location of the debug/TUI log file (``GH_WT_LOG_FILE`` overrides it)."""
    override = os.environ.get('GH_WT_LOG_FILE')
    if override:
        return Path(override).expanduser()
    return Path.home() / '.gh-wt' / 'gh-wt.log'


def _console_level(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode='w')
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=DETAILED_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _console_handler(level: int, debug: bool, use_color: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if debug:
        formatter = LevelColorFormatter(DETAILED_FORMAT, DATE_FORMAT, use_color=use_color)
    else:
        formatter = LevelColorFormatter(SHORT_FORMAT, use_color=use_color)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    verbose: bool = False, debug: bool = False, tui_mode: bool = False, use_color: bool = True
) -> None:
    """
    Configure logging for the application.

    Console output goes to stderr so it never mixes with command output.
    The TUI owns the terminal, so in TUI mode everything goes to the log
    file instead; ``--debug`` writes the log file as well.

    Args:
        verbose: Show INFO messages on the console
        debug: Show DEBUG messages with timestamps, and write the log file
        tui_mode: Log only to the file
        use_color: Color level names when stderr is a terminal
    """
    level = _console_level(verbose, debug)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG if tui_mode else level)

    if tui_mode or debug:
        root_logger.addHandler(_file_handler(get_log_file()))
    if not tui_mode:
        root_logger.addHandler(_console_handler(level, debug, use_color))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the specified module.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    # Keep 'services.git.*' distinct from GitPython's own 'git' logger
    if name.startswith('gh_wt.'):
        name = name[len('gh_wt.'):]
    return logging.getLogger(name)
