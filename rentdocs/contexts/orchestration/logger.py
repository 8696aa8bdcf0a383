"""
Orchestration context logger.

Provides logging interface for orchestration context with automatic [pipeline] prefix.
All orchestration modules should import from this module, not from loguru directly.
"""

import os
from pathlib import Path

from loguru import logger

from rentdocs.utils.logger import request_scope
from rentdocs.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[pipeline]"


def setup_pipeline_logger(log_dir: Path, template_source_mode: str = None) -> Path:
    """
    Setup logger for orchestration context.

    Configures loguru with provenance tracking and pipeline-specific context.

    Args:
        log_dir: Directory for this generation session
        template_source_mode: Template source the pipeline was built with

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="pipeline",
        log_dir=log_dir,
        provenance={
            "Template source": template_source_mode,
            "Events file": os.getenv("PIPELINE_EVENTS_FILE"),
        },
    )


# [pipeline]-prefixed wrappers (records report the caller, not this module)


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


# High-level orchestration-specific logging helpers


def log_request_start(request_id: str, file_name: str, template_names) -> None:
    """Log a new generation request."""
    _log_info(f"Request {request_id[:8]}: {file_name} from {', '.join(template_names)}")


def log_transition(request_id: str, old_state, new_state) -> None:
    """Log a state transition."""
    _log_debug(f"Request {request_id[:8]}: {old_state.value} -> {new_state.value}")


def log_request_result(result, elapsed_time: float) -> None:
    """Log how a request ended."""
    short_id = result.request_id[:8]
    if result.failed:
        _log_error(f"Request {short_id} failed during {result.failed_stage.value}: {result.error}")
    elif result.delivery_error is not None:
        _log_warning(f"Request {short_id}: document generated but not delivered ({elapsed_time:.2f}s)")
    else:
        _log_success(
            f"Request {short_id}: {result.artifact.file_name}, "
            f"{result.artifact.page_count} page(s) ({elapsed_time:.2f}s)"
        )
