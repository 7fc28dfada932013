"""Utility functions and helpers."""

from .logger import setup_logger, get_logger
from .cache import PersistentTranslationCache
from .concurrency import ConcurrencyLimiter, SingleFlight
from .config_loader import load_config, save_config

__all__ = [
    'setup_logger',
    'get_logger',
    'PersistentTranslationCache',
    'ConcurrencyLimiter',
    'SingleFlight',
    'load_config',
    'save_config'
]
