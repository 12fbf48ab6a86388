"""Axotl Press - publishing backend with editorial review, notifications and PDF export."""

__version__ = "0.1.0"
