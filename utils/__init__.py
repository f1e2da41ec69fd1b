"""
Utility modules for the scoring engine.
"""

from .formatting import format_currency, format_percent, format_score
from .config import Config

__all__ = ["format_currency", "format_percent", "format_score", "Config"]
