"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[render]"


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


# High-level rendering-specific logging helpers


def log_render_start(file_name: str, geometry, measurer_name: str) -> None:
    """Log start of rendering with page geometry."""
    _log_info(f"Rendering {file_name} with {measurer_name}")
    _log_debug(
        f"  Page: {geometry.page_size.width}x{geometry.page_size.height}px, "
        f"content {geometry.content_width}x{geometry.content_height}px"
    )


def log_flow_measured(layout, scale: float) -> None:
    """Log the measured flow and the scale applied to it."""
    _log_debug(f"  Flow: {layout.width}x{layout.height}px (scale {scale:.3f})")
    if layout.timed_out_images:
        _log_warning(
            f"{layout.timed_out_images} image(s) did not load in time; rendering them as they are"
        )


def log_render_result(artifact, elapsed_time: float) -> None:
    """Log a finished rendering."""
    _log_success(
        f"{artifact.file_name}: {artifact.page_count} page(s), "
        f"flow {artifact.flow_height:.1f}px ({elapsed_time:.2f}s)"
    )
