"""Reporting and analysis of tracked time and income."""
