"""
Pipeline event logging utilities for rentdocs (Tier 2 logging).

Records document-generation request lifecycle events (state transitions,
delivery outcomes) as JSON Lines, one object per line. This is for auditing
and for the CLI `events` command.

For detailed within-context logging (Tier 1), use rentdocs.utils.logger instead.

Usage:
    from rentdocs.utils.event_logging import log_state_change

    log_state_change(
        request_id="5f0c...",
        old_state="resolving",
        new_state="merging",
        source="orchestration",
        events_file=Path("outs/logs/pipeline_events.log"),
    )
"""

import json
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from dotenv import load_dotenv

from rentdocs.utils.timestamp import now_exact

load_dotenv()
_events_file_env = os.getenv("PIPELINE_EVENTS_FILE")
PIPELINE_EVENTS_FILE = Path(_events_file_env) if _events_file_env else None


def _events_path(events_file: Optional[Union[str, Path]]) -> Optional[Path]:
    if events_file is not None:
        return Path(events_file)
    return PIPELINE_EVENTS_FILE


def log_pipeline_event(
    event_type: str,
    request_id: str,
    source: str,
    events_file: Optional[Union[str, Path]] = None,
    **extra_fields,
) -> bool:
    """
    Append an event to the pipeline event log.

    Nothing is written when neither `events_file` nor PIPELINE_EVENTS_FILE is set.

    Args:
        event_type: Type of event (e.g., "state_change", "delivery_failed")
        request_id: Document-generation request identifier
        source: Event source (e.g., "orchestration", "delivery", "cli")
        events_file: Explicit log path (overrides PIPELINE_EVENTS_FILE)
        **extra_fields: Additional event-specific fields

    Returns:
        True if the event was written
    """
    path = _events_path(events_file)
    if path is None:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "request_id": request_id,
        "source": source,
        **extra_fields,
    }

    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, default=str) + "\n")
    return True


def log_state_change(
    request_id: str,
    old_state: str,
    new_state: str,
    source: str,
    events_file: Optional[Union[str, Path]] = None,
    **extra_fields,
) -> bool:
    """
    Log a request state transition.

    Args:
        request_id: Document-generation request identifier
        old_state: Previous state value
        new_state: New state value
        source: Event source
        events_file: Explicit log path (overrides PIPELINE_EVENTS_FILE)
        **extra_fields: Additional fields (e.g., error, page_count)
    """
    return log_pipeline_event(
        event_type="state_change",
        request_id=request_id,
        source=source,
        events_file=events_file,
        old_state=old_state,
        new_state=new_state,
        **extra_fields,
    )


def get_recent_events(
    n: int = 10,
    request_id: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Union[str, Path]] = None,
) -> List[Dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        request_id: Filter to only events for this request (optional)
        event_type: Filter to only events of this type (optional)
        events_file: Explicit log path (overrides PIPELINE_EVENTS_FILE)

    Returns:
        List of event dicts (most recent last)
    """
    path = _events_path(events_file)
    if path is None or not path.exists():
        return []

    events = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if request_id:
        events = [e for e in events if e.get("request_id") == request_id]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
