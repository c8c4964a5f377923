"""
Services package for Trackbox.
"""

from . import track_service

__all__ = ['track_service']
