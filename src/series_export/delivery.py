"""
Delivery - export filename and saving the finished document

Responsibilities:
1. deterministic filename: series name, first three usernames, date
2. write the bytes under that name in the output directory

Test points:
- test_filename_more_than_three_users
- test_filename_sanitizes_series_name
- test_save_writes_file
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from .config import RuntimeConfig, get_config
from .interfaces import DeliveryError, IFileSaver

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")

MAX_FILENAME_USERS = 3


def sanitize(name: str) -> str:
    """Non-alphanumeric characters become '_' (a run collapses into one)"""
    return _NON_ALNUM.sub("_", name)


def build_export_filename(series_name: str, usernames: Sequence[str], today: date | None = None) -> str:
    """
    <series>_<user1>_<user2>_<user3>[_and_<n>_more]_<YYYY-MM-DD>.pdf

    Args:
        series_name: series nama
        usernames: distinct usernames in dataset order
        today: date stamp (defaults to today)
    """
    today = today or date.today()
    listed = "_".join(usernames[:MAX_FILENAME_USERS])
    suffix = ""
    if len(usernames) > MAX_FILENAME_USERS:
        suffix = f"_and_{len(usernames) - MAX_FILENAME_USERS}_more"
    return f"{sanitize(series_name)}_{listed}{suffix}_{today.isoformat()}.pdf"


class FileDelivery(IFileSaver):
    """Saves documents into the configured output directory"""

    def __init__(self, output_dir: Path | None = None, config: RuntimeConfig | None = None):
        config = config or get_config()
        self.output_dir = Path(output_dir) if output_dir else config.output.output_dir

    def save(self, data: bytes, filename: str) -> Path:
        target = self.output_dir / filename
        tmp = target.with_name(target.name + ".part")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            tmp.replace(target)
        except OSError as e:
            if tmp.exists():
                tmp.unlink()
            raise DeliveryError(f"Could not save {filename}: {e}") from e

        logger.info(f"Saved export {target} ({len(data)} bytes)")
        return target
