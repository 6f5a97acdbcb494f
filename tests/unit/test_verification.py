"""
Verification code generator unit tests
"""

import pytest
from reportlab.graphics.shapes import Drawing

from series_export.codes import VerificationCodeGenerator, build_qr_drawing

pytestmark = pytest.mark.anyio


class BrokenGenerator(VerificationCodeGenerator):
    def encode(self, username):
        if username == "bob":
            raise ValueError("encoder exploded")
        return super().encode(username)


class TestVerificationCodes:
    """QR codes per user"""

    def test_drawing_size(self):
        drawing = build_qr_drawing("https://grafikarsa.com/alice", 40)
        assert isinstance(drawing, Drawing)
        assert (drawing.width, drawing.height) == (40, 40)

    async def test_one_entry_per_username(self, runtime_config):
        """Duplicates collapse into one entry"""
        codes = await VerificationCodeGenerator(runtime_config).generate(["alice", "bob", "alice"])
        assert sorted(codes) == ["alice", "bob"]

    async def test_payload_is_profile_url(self, runtime_config):
        codes = await VerificationCodeGenerator(runtime_config).generate(["alice"])
        assert codes["alice"].target_url == "https://grafikarsa.com/alice"

    async def test_failure_leaves_entry_absent(self, runtime_config):
        """A failing user does not stop the others"""
        missing = []
        codes = await BrokenGenerator(runtime_config).generate(
            ["alice", "bob", "siti"], on_missing=missing.append
        )
        assert "bob" not in codes
        assert sorted(codes) == ["alice", "siti"]
        assert missing == ["bob"]
