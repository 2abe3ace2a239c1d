"""
Utilities Package for Uptime Probe

Logging, validation and time helpers shared by every layer.
"""

from utils.helpers import TimeHelper
from utils.logger import get_logger, log_execution_time, setup_logging
from utils.validators import RequestValidator, URLValidator

__all__ = [
    "TimeHelper",
    "get_logger",
    "log_execution_time",
    "setup_logging",
    "RequestValidator",
    "URLValidator",
]
