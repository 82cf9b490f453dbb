"""Jotter: command line client for a REST notes backend."""

__version__ = "0.1.0"
