"""Classify, compact and deduplicate raw log lines into canonical events."""

__version__ = "0.1.0"