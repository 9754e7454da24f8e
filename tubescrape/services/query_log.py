"""Append-only log of the searches each user runs."""

import datetime
import json
import logging
import threading
from pathlib import Path

from tubescrape.config import get_settings

logger = logging.getLogger(__name__)

_lock = threading.Lock()


def append_query(path: Path, user_id: str, query: str) -> None:
    entry = {
        "user_id": user_id,
        "query": query,
        "timestamp": datetime.datetime.now(tz=datetime.timezone.utc).isoformat(),
    }
    with _lock, path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry) + "\n")


def record(user_id: str | None, query: str) -> None:
    """Record a search. Never raises: logging must not fail the search it belongs to."""
    if not user_id:
        return
    try:
        append_query(get_settings().query_log_file, user_id, query)
    except OSError as e:
        logger.warning("Could not record query for %s: %s", user_id, e)
