"""Bulk launch, track and archive GitHub organization migrations."""

__version__ = "0.1.0"
