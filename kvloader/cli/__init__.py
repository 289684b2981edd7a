"""
Command line interface for kvloader.
"""

from .kvctl import main

__all__ = ['main']
