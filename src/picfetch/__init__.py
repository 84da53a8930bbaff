"""Headless-browser image download service."""

__version__ = "0.1.0"
