"""Visualization modules for price-range reports."""

from .report_generator import ReportGenerator
from .plotter import Plotter

__all__ = ['ReportGenerator', 'Plotter']
