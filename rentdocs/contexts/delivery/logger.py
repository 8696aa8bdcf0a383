"""
Delivery context logger.

Provides logging interface for delivery context with automatic [deliver] prefix.
All delivery modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[deliver]"


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


# High-level delivery-specific logging helpers


def log_delivery_start(sink_name: str, file_name: str, page_count: int) -> None:
    """Log handing an artifact to a sink."""
    _log_info(f"Delivering {file_name} ({page_count} page(s)) via {sink_name}")


def log_delivery_result(receipt) -> None:
    """Log a completed delivery."""
    _log_success(f"{receipt.sink_name}: {receipt.file_name} -> {receipt.location}")


def log_delivery_failure(sink_name: str, file_name: str, error: Exception) -> None:
    """Log a failed delivery; the artifact itself was built."""
    _log_error(f"{sink_name} failed for {file_name}: {error}")
