"""
Verification codes - one QR code per distinct student
"""

from .verification import VerificationCodeGenerator, build_qr_drawing

__all__ = ["VerificationCodeGenerator", "build_qr_drawing"]
