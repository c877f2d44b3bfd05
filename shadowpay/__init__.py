"""ShadowPay operator console."""

__version__ = "0.4.0"

__all__ = ["__version__"]
