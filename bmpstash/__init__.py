"""Store files inside 24-bit BMP images and recover them."""

__version__ = "1.0.0"