"""
Assembly context logger.

Provides logging interface for assembly context with automatic [assemble] prefix.
All assembly modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[assemble]"


def _log_info(message: str) -> None:
    logger.opt(depth=1).info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    logger.opt(depth=1).success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    logger.opt(depth=1).error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    logger.opt(depth=1).warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    logger.opt(depth=1).debug(f"{CONTEXT_PREFIX} {message}")


# High-level assembly-specific logging helpers


def log_merge_start(document_names) -> None:
    """Log start of a merge."""
    _log_info(f"Merging {len(document_names)} document(s)")
    _log_debug(f"  Order: {', '.join(document_names)}")


def log_merge_result(merged) -> None:
    """Log a finished merge with its fragment and marker counts."""
    _log_success(
        f"Merged {merged.document_count} document(s): "
        f"{len(merged.fragments)} style fragment(s), {merged.page_break_count} page break(s)"
    )
