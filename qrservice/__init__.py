"""QR Code generation (segments, encoding, masking) and a minimal HTTP service."""

__version__ = "0.1.0"
__all__ = ["segment", "qrcode", "service"]