"""Offline-first data and gamification engine for the STEM learning app."""

__version__ = "0.1.0"
