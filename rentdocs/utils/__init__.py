"""
Shared utilities for rentdocs.

Common functionality used across contexts:
- Logging setup and pipeline event logging
- Timestamps
- Value formatting for placeholders
- PDF inspection
"""

from rentdocs.utils.timestamp import now, now_exact, today

__all__ = ["now", "now_exact", "today"]
