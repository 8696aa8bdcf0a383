"""
Tier 1 (detailed) logging setup.

One loguru configuration per session: a DEBUG file in the session's log
directory, an INFO console stream, and a provenance header at the top of the
file. Lines logged inside `request_scope` carry the request's short id.
Context-specific wrappers live in contexts/{context}/logger.py.
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from dotenv import load_dotenv
from loguru import logger

import rentdocs

load_dotenv()
CONSOLE_LOG_LEVEL = os.getenv("CONSOLE_LOG_LEVEL", "INFO")

NO_REQUEST = "--------"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {extra[request_id]} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    context_name: str,
    log_dir: Union[str, Path],
    provenance: Optional[Dict[str, object]] = None,
    console_level: str = CONSOLE_LOG_LEVEL,
) -> Path:
    """
    Route loguru output to <log_dir>/<context_name>.log and the console.

    Replaces any handlers configured earlier in the process.

    Args:
        context_name: Log file stem (e.g., "pipeline")
        log_dir: Session directory, created if missing
        provenance: Extra header lines (None values are skipped)
        console_level: Minimum console level

    Returns:
        Path to the log file

    Example:
        log_file = setup_logger(
            "pipeline",
            Path("outs/logs/generate_20261018_123456"),
            provenance={"Template source": "assets"},
        )
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.configure(extra={"request_id": NO_REQUEST})
    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(provenance)
    return log_file


def log_provenance(provenance: Optional[Dict[str, object]] = None) -> None:
    """Write the session header: how this process was started, then any extras."""
    header = {
        "rentdocs": rentdocs.__version__,
        "Command": " ".join(sys.argv),
        "Working directory": Path.cwd(),
        "Python": sys.version.split()[0],
        **(provenance or {}),
    }
    logger.info("=" * 80)
    for key, value in header.items():
        if value is not None:
            logger.info(f"{key}: {value}")
    logger.info("=" * 80)


@contextmanager
def request_scope(request_id: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with the request's short id."""
    with logger.contextualize(request_id=request_id[:8]):
        yield
