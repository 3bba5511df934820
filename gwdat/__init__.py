"""Decoders for game asset data: block-compressed textures, model geometry, text and sounds."""

__version__ = "0.1.0"
__all__ = ["dxt", "mesh", "model", "text"]