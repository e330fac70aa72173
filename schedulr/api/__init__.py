"""
Web interface for Schedulr
"""

from .flask_server import SchedulrAPI, create_app

__all__ = ['SchedulrAPI', 'create_app']
