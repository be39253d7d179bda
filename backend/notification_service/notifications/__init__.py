"""
Multi-channel notification delivery.

Channel senders (push, email, SMS), the preference resolver, the concurrent
delivery orchestrator and the NotificationService facade used by the API.
"""
