"""Utility helpers exposed by the ShadowPay console."""

from . import logbook
from .logbook import get_logger, mask_secret
from .paths import state_dir

__all__ = ["get_logger", "logbook", "mask_secret", "state_dir"]
