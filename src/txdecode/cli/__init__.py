"""
CLI module for txdecode commands.

``main`` dispatches to the decode, tx and selector commands in ``decode``.
"""

from .main import main

__all__ = ['main']
