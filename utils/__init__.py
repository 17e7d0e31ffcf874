"""
Utility modules for the product API client.
"""

from .events import EventEmitter
from .console import console, VerboseLevel

__all__ = ["EventEmitter", "console", "VerboseLevel"]
