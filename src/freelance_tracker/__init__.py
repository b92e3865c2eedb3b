"""Freelance Tracker - time and income tracking for freelancers."""

__version__ = "0.1.0"
