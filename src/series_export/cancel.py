"""
Cancellation token shared by the executor and the stages it drives

Checked between stages and between image batches; an in-flight request is
never interrupted.
"""

from __future__ import annotations

from .interfaces import ExportCancelled


class CancelToken:
    def __init__(self) -> None:
        self._cancelled = False
        self.reason = ""

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "cancelled") -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise ExportCancelled(self.reason)
