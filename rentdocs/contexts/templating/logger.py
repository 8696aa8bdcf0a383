"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[template]"


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


# High-level templating-specific logging helpers


def log_fetch_start(names, store_name: str) -> None:
    """Log start of a template fetch."""
    _log_info(f"Fetching {len(names)} template(s) from {store_name}")
    _log_debug(f"  Templates: {', '.join(names)}")


def log_resolution_result(template_name: str, result) -> None:
    """
    Log degradations recorded while resolving one template.

    Args:
        template_name: Template identifier (for log context)
        result: ResolutionResult from PlaceholderResolver.resolve_with_report()
    """
    for name in result.malformed_conditionals:
        _log_warning(f"{template_name}: unterminated conditional '{name}' left as text")
    if result.unresolved:
        _log_debug(
            f"{template_name}: {len(result.unresolved)} placeholder(s) emptied: "
            f"{', '.join(sorted(result.unresolved))}"
        )
    for token in result.stripped_assets:
        _log_debug(f"{template_name}: removed image for empty asset '{token}'")
    if result.discarded_tags:
        _log_debug(
            f"{template_name}: {len(result.discarded_tags)} unknown tag(s) removed: "
            f"{', '.join(result.discarded_tags)}"
        )
