"""
Schedulr - weekly class schedule viewer with AI study suggestions

This package provides a small web application that:
- Parses iCalendar (.ics) class schedules, expanding recurring events
- Lays the first week of classes out on a weekly grid
- Asks a generative AI service for study blocks that fit the gaps
"""

__version__ = "1.0.0"
__author__ = "Schedulr Team"
