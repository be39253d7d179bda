"""Multi-channel notification service: push, email and SMS fan-out."""

__version__ = "0.1.0"
