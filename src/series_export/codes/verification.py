"""
Verification code generator - QR code of each student's profile URL

Responsibilities:
1. build one QR drawing per distinct username
2. payload depends on the username alone (profile URL template)
3. tolerate per-user failures (entry left absent)

Test points:
- test_one_entry_per_username
- test_payload_is_profile_url
- test_failure_leaves_entry_absent
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import anyio
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing

from ..config import RuntimeConfig, get_config
from ..models import CodeCache, VerificationCode

logger = logging.getLogger(__name__)


def build_qr_drawing(payload: str, size: float) -> Drawing:
    """Square QR drawing of `size` points encoding `payload`"""
    widget = QrCodeWidget(payload)
    x0, y0, x1, y1 = widget.getBounds()
    width, height = x1 - x0, y1 - y0
    drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
    drawing.add(widget)
    return drawing


class VerificationCodeGenerator:
    """Per-user QR codes"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self.url_template = self.config.verification.profile_url_template
        self.size = self.config.verification.qr_size

    def profile_url(self, username: str) -> str:
        return self.url_template.format(username=username)

    def encode(self, username: str) -> VerificationCode:
        url = self.profile_url(username)
        return VerificationCode(
            username=username,
            target_url=url,
            drawing=build_qr_drawing(url, self.size),
        )

    async def generate(
        self,
        usernames: Iterable[str],
        *,
        on_missing: Callable[[str], None] | None = None,
    ) -> CodeCache:
        """
        One code per distinct username, generated one at a time

        Args:
            usernames: usernames (duplicates are ignored)
            on_missing: called with each username whose code failed

        Returns:
            CodeCache keyed by username
        """
        entries: dict[str, VerificationCode] = {}
        for username in dict.fromkeys(usernames):
            try:
                entries[username] = await anyio.to_thread.run_sync(self.encode, username)
            except Exception as e:
                logger.warning(f"Verification code failed for {username}: {e}")
                if on_missing is not None:
                    on_missing(username)

        logger.info(f"Generated {len(entries)} verification codes")
        return CodeCache(entries)
