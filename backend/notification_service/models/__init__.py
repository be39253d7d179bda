"""Pydantic models shared by the notification service."""
