"""
Secreto Diary - a personal diary service with a REST API.

This package provides a small web service for writing dated diary entries
with photos and mood tags, searching and filtering them, and translating
them on demand.
"""

__version__ = "0.1.0"
