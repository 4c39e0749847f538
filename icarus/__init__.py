"""
Icarus - dashboard for self-hosted media-server tooling.
"""

from .core import __version__

__all__ = ['__version__']
