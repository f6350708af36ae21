"""Lecture Reports API - weekly lecture reporting and review for universities."""

__version__ = "1.0.0"
