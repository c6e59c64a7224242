"""
Utilities module for the Business Ranking Service.
"""
from .logger import logger, init_logging, setup_logging
from .numbers import round_half_up, clamp

__all__ = ["logger", "init_logging", "setup_logging", "round_half_up", "clamp"]
