"""
Utilities package initialization.
"""
from .logger import get_logger, log_revenue_event, log_timing, setup_logging

__all__ = ["get_logger", "log_revenue_event", "log_timing", "setup_logging"]
