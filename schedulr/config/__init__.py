"""
Configuration for Schedulr
"""

from .settings import Config

__all__ = ['Config']
