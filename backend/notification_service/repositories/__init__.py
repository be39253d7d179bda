"""Async repositories over the notification service tables."""
