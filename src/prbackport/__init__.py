"""
prbackport - Backport a commit to a release branch and open the pull request
"""

__version__ = "0.3.0"

from .core import Backporter
from .errors import BackportError

__all__ = ["Backporter", "BackportError"]
