"""Utility modules for the price-range framework."""

from .model_analysis import ModelAnalyzer
from .config import Config, DEFAULT_CONFIG

__all__ = ['ModelAnalyzer', 'Config', 'DEFAULT_CONFIG']
