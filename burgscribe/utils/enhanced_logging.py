"""
Logging helpers with colour-coded console output and structured fields.

Features:
- Color-coded log levels
- Structured ``key=value`` fields carried through ``extra={"fields": ...}``
- Optional plain-text log file
- Visual banners for CLI runs
"""

import logging
from typing import Any, Optional


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for terminal formatting."""
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'

    BRIGHT_RED = '\033[91m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_CYAN = '\033[96m'
    BRIGHT_WHITE = '\033[97m'

    BOLD = '\033[1m'
    DIM = '\033[2m'

    RESET = '\033[0m'

    BG_RED = '\033[41m'


def _render_fields(record: logging.LogRecord) -> str:
    fields = getattr(record, "fields", None)
    if not isinstance(fields, dict) or not fields:
        return ""
    return " " + " ".join(f"{key}={value!r}" for key, value in fields.items())


class EnhancedFormatter(logging.Formatter):
    """Custom formatter with color-coding and structured field rendering."""

    LEVEL_FORMATS = {
        logging.DEBUG: f"{Colors.CYAN}DEBUG{Colors.RESET}",
        logging.INFO: f"{Colors.GREEN}INFO{Colors.RESET}",
        logging.WARNING: f"{Colors.YELLOW}WARNING{Colors.RESET}",
        logging.ERROR: f"{Colors.BRIGHT_RED}{Colors.BOLD}ERROR{Colors.RESET}",
        logging.CRITICAL: f"{Colors.BG_RED}{Colors.BRIGHT_WHITE}{Colors.BOLD}CRITICAL{Colors.RESET}"
    }

    def format(self, record):
        """Format log record with colors and trailing structured fields."""
        levelname = self.LEVEL_FORMATS.get(record.levelno, record.levelname)

        name_color = Colors.BRIGHT_CYAN if 'generator' in record.name.lower() else Colors.CYAN
        colored_name = f"{name_color}{record.name}{Colors.RESET}"

        timestamp = f"{Colors.DIM}{self.formatTime(record, self.datefmt)}{Colors.RESET}"

        body = record.getMessage() + _render_fields(record)
        if record.levelno >= logging.ERROR:
            message = f"{Colors.BRIGHT_RED}{body}{Colors.RESET}"
        elif record.levelno >= logging.WARNING:
            message = f"{Colors.YELLOW}{body}{Colors.RESET}"
        elif record.levelno >= logging.INFO:
            message = body
        else:
            message = f"{Colors.DIM}{body}{Colors.RESET}"

        formatted = f"{timestamp} - {colored_name} - {levelname} - {message}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


class PlainFieldFormatter(logging.Formatter):
    """File formatter that keeps structured fields but drops colours."""

    def format(self, record):
        return super().format(record) + _render_fields(record)


def log_event(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    """Log ``message`` at ``level`` with ``fields`` attached as structured data."""
    logger.log(level, message, extra={"fields": fields})


def create_banner(text: str, char: str = "=", width: int = 80, color: str = Colors.BRIGHT_BLUE) -> str:
    """Create a visual banner for section headers."""
    padding = max(0, (width - len(text) - 2) // 2)
    banner = f"{char * padding} {text} {char * padding}"
    if len(banner) < width:
        banner += char * (width - len(banner))
    return f"\n{color}{Colors.BOLD}{banner}{Colors.RESET}\n"


def setup_logging(console_level: int = logging.INFO, log_file: Optional[str] = None,
                  file_level: int = logging.DEBUG) -> logging.Logger:
    """Configure the root logger once at process start."""
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(EnhancedFormatter(datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(PlainFieldFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    # httpx logs every request at INFO; keep it quiet unless debugging.
    logging.getLogger("httpx").setLevel(max(console_level, logging.WARNING))
    return logger

