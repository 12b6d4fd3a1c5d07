"""Scheduled social media publishing service."""

__version__ = "0.1.0"
