"""
Delivery Orchestrator

Fans one notification out across the requested channels:

1. Resolve the user's preferences (fail-open, never raises)
2. Deduplicate the requested channels and keep those that are enabled and
   have addressing data
3. Invoke the eligible senders concurrently with asyncio.gather
4. Return a mapping of channel name to DeliveryResult

Skipped channels are absent from the result. A sender that raises is recorded
as a failed result for its own channel only.
"""

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from notification_service.models.notification import (
    DeliveryResult,
    Notification,
    NotificationChannel,
    NotificationPayload,
    UserPreferences,
)
from notification_service.notifications.channels import ChannelSender
from notification_service.notifications.preferences import PreferenceResolver

logger = structlog.get_logger(__name__)


class DeliveryOrchestrator:
    """Concurrent multi-channel fan-out for a single notification."""

    def __init__(
        self,
        preference_resolver: PreferenceResolver,
        senders: Mapping[NotificationChannel, ChannelSender],
    ):
        """
        Args:
            preference_resolver: Resolves the per-request preference snapshot
            senders: Channel clients keyed by channel
        """
        self.preference_resolver = preference_resolver
        self.senders = senders

    async def deliver(
        self,
        user_id: str,
        notification: Notification,
        requested_channels: Iterable[NotificationChannel],
    ) -> dict[str, DeliveryResult]:
        """
        Deliver a notification on every eligible requested channel.

        Args:
            user_id: Target user id
            notification: Persisted notification record
            requested_channels: Channels asked for by the caller

        Returns:
            Mapping of channel name to DeliveryResult; empty when nothing is
            eligible. Never raises.
        """
        preferences = await self.preference_resolver.resolve(user_id)
        selected = self.select_channels(preferences, requested_channels)

        if not selected:
            logger.info(
                "No eligible channels for notification",
                notification_id=str(notification.id),
                user_id=user_id,
            )
            return {}

        payload = NotificationPayload.from_notification(notification)

        results = await asyncio.gather(
            *(self._attempt(channel, address, payload) for channel, address in selected)
        )

        outcome = {channel.value: result for (channel, _), result in zip(selected, results)}

        logger.info(
            "Notification fan-out complete",
            notification_id=str(notification.id),
            user_id=user_id,
            attempted=list(outcome),
            succeeded=[name for name, result in outcome.items() if result.success],
        )

        return outcome

    def select_channels(
        self,
        preferences: UserPreferences,
        requested_channels: Iterable[NotificationChannel],
    ) -> list[tuple[NotificationChannel, Any]]:
        """
        Pick the channels to attempt, in request order, with their addresses.

        A channel is attempted only if it was requested, is enabled, has
        addressing data and has a configured sender.
        """
        selected: list[tuple[NotificationChannel, Any]] = []
        seen: set[NotificationChannel] = set()

        for channel in requested_channels:
            if channel in seen:
                continue
            seen.add(channel)

            if not preferences.is_enabled(channel):
                logger.debug("Channel disabled by user", channel=channel.value)
                continue

            address = preferences.address_for(channel)
            if address is None:
                logger.debug("No addressing data for channel", channel=channel.value)
                continue

            if channel not in self.senders:
                logger.warning("No sender configured for channel", channel=channel.value)
                continue

            selected.append((channel, address))

        return selected

    async def _attempt(
        self,
        channel: NotificationChannel,
        address: Any,
        payload: NotificationPayload,
    ) -> DeliveryResult:
        """Run one sender, converting any exception into a failed result."""
        try:
            return await self.senders[channel].send(address, payload)
        except Exception as e:
            logger.error(
                "Channel sender raised unexpectedly",
                channel=channel.value,
                notification_id=str(payload.notification_id),
                error=str(e),
                exc_info=True,
            )
            return DeliveryResult.failed(str(e) or type(e).__name__)
