"""
API tests for the notification routes.

Runs the FastAPI app over ASGITransport with an in-memory SQLite session and
recording channel senders.
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from notification_service.api.main import app
from notification_service.models.notification import NotificationChannel

BASE = "/api/v1/notifications"

SUBSCRIPTION = {
    "endpoint": "https://fcm.googleapis.com/fcm/send/abc123",
    "keys": {"p256dh": "BNcRdre", "auth": "tBHItJI5"},
    "expirationTime": None,
}


async def send(client, headers, user_id, **overrides):
    body = {
        "userId": user_id,
        "type": "friend_request",
        "title": "New friend request",
        "message": "Alex wants to connect with you",
        "data": {"from_user_id": "user-42"},
    }
    body.update(overrides)
    return await client.post(f"{BASE}/send", json=body, headers=headers)


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "notification-service"
        assert "timestamp" in body


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token_rejected(self, async_client, test_user_id):
        response = await async_client.get(f"{BASE}/user/{test_user_id}")

        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_invalid_token_rejected(self, async_client, test_user_id):
        response = await async_client.get(
            f"{BASE}/user/{test_user_id}", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 401


class TestSendNotification:
    @pytest.mark.asyncio
    async def test_send_without_settings_creates_record_and_skips_push(
        self, async_client, auth_headers, test_user_id, fake_senders
    ):
        response = await send(async_client, auth_headers, test_user_id)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Notification sent successfully"
        notification = body["data"]["notification"]
        assert notification["user_id"] == test_user_id
        assert notification["title"] == "New friend request"
        assert notification["type"] == "friend_request"
        assert notification["read"] is False
        assert body["data"]["delivery_results"] == {}
        assert fake_senders[NotificationChannel.PUSH].calls == []

    @pytest.mark.asyncio
    async def test_send_delivers_on_enabled_channels(
        self, async_client, auth_headers, test_user_id, fake_senders
    ):
        await async_client.post(
            f"{BASE}/push-subscription", json={"subscription": SUBSCRIPTION}, headers=auth_headers
        )
        await async_client.patch(
            f"{BASE}/preferences",
            json={"email_enabled": False, "email": "jane@example.com"},
            headers=auth_headers,
        )

        response = await send(
            async_client, auth_headers, test_user_id, channels=["push", "email"]
        )

        assert response.status_code == 200
        results = response.json()["data"]["delivery_results"]
        assert set(results) == {"push"}
        assert results["push"]["success"] is True
        assert results["push"]["status_code"] == 201
        assert fake_senders[NotificationChannel.EMAIL].calls == []

        address, payload = fake_senders[NotificationChannel.PUSH].calls[0]
        assert address.endpoint == SUBSCRIPTION["endpoint"]
        assert payload.data == {"from_user_id": "user-42"}

    @pytest.mark.asyncio
    async def test_send_missing_title_is_400(
        self, async_client, auth_headers, test_user_id, fake_senders
    ):
        response = await send(async_client, auth_headers, test_user_id, title=None)

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields"

        listing = await async_client.get(f"{BASE}/user/{test_user_id}", headers=auth_headers)
        assert listing.json()["data"]["notifications"] == []

    @pytest.mark.asyncio
    async def test_send_unknown_channel_is_skipped(
        self, async_client, auth_headers, test_user_id, fake_senders
    ):
        await async_client.post(
            f"{BASE}/push-subscription", json={"subscription": SUBSCRIPTION}, headers=auth_headers
        )

        response = await send(
            async_client, auth_headers, test_user_id, channels=["push", "fax"]
        )

        assert response.status_code == 200
        results = response.json()["data"]["delivery_results"]
        assert set(results) == {"push"}
        assert len(fake_senders[NotificationChannel.PUSH].calls) == 1

        listing = await async_client.get(f"{BASE}/user/{test_user_id}", headers=auth_headers)
        assert len(listing.json()["data"]["notifications"]) == 1

    @pytest.mark.asyncio
    async def test_send_long_message_is_stored(self, async_client, auth_headers, test_user_id):
        response = await send(async_client, auth_headers, test_user_id, message="x" * 1001)

        assert response.status_code == 200
        assert response.json()["data"]["notification"]["message"] == "x" * 1001

    @pytest.mark.asyncio
    async def test_send_null_data_is_empty_payload(
        self, async_client, auth_headers, test_user_id
    ):
        response = await send(async_client, auth_headers, test_user_id, data=None)

        assert response.status_code == 200
        assert response.json()["data"]["notification"]["data"] == {}

    @pytest.mark.asyncio
    async def test_send_oversized_user_id_is_400(self, async_client, auth_headers):
        response = await send(async_client, auth_headers, "u" * 129)

        assert response.status_code == 400
        assert response.json()["detail"] == "userId must be at most 128 characters"

    @pytest.mark.asyncio
    async def test_notification_type_serialized_as_type(
        self, async_client, auth_headers, test_user_id
    ):
        await send(async_client, auth_headers, test_user_id)

        response = await async_client.get(f"{BASE}/user/{test_user_id}", headers=auth_headers)

        notification = response.json()["data"]["notifications"][0]
        assert notification["type"] == "friend_request"
        assert "notification_type" not in notification


class TestListAndReadState:
    @pytest.mark.asyncio
    async def test_list_paginates(self, async_client, auth_headers, test_user_id):
        for i in range(3):
            await send(async_client, auth_headers, test_user_id, title=f"Title {i}")

        response = await async_client.get(
            f"{BASE}/user/{test_user_id}", params={"page": 1, "limit": 2}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["notifications"]) == 2
        assert data["pagination"] == {"page": 1, "limit": 2, "has_more": True}

    @pytest.mark.asyncio
    async def test_list_other_user_forbidden(
        self, async_client, auth_headers, test_user_id_2
    ):
        response = await async_client.get(f"{BASE}/user/{test_user_id_2}", headers=auth_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_mark_read_and_unread_filter(self, async_client, auth_headers, test_user_id):
        first = (await send(async_client, auth_headers, test_user_id)).json()["data"]
        await send(async_client, auth_headers, test_user_id)
        notification_id = first["notification"]["id"]

        response = await async_client.patch(
            f"{BASE}/{notification_id}/read", headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["read"] is True
        assert data["read_at"] is not None

        unread = await async_client.get(
            f"{BASE}/user/{test_user_id}", params={"unread_only": "true"}, headers=auth_headers
        )
        ids = [n["id"] for n in unread.json()["data"]["notifications"]]
        assert notification_id not in ids
        assert len(ids) == 1

    @pytest.mark.asyncio
    async def test_mark_read_unknown_is_404(self, async_client, auth_headers):
        response = await async_client.patch(f"{BASE}/{uuid4()}/read", headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_read_other_users_notification_is_404(
        self, async_client, auth_headers, auth_headers_2, test_user_id
    ):
        created = (await send(async_client, auth_headers, test_user_id)).json()["data"]

        response = await async_client.patch(
            f"{BASE}/{created['notification']['id']}/read", headers=auth_headers_2
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_all_read(self, async_client, auth_headers, test_user_id):
        for _ in range(3):
            await send(async_client, auth_headers, test_user_id)

        response = await async_client.patch(
            f"{BASE}/user/{test_user_id}/read-all", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "All notifications marked as read"}

        unread = await async_client.get(
            f"{BASE}/user/{test_user_id}", params={"unread_only": "true"}, headers=auth_headers
        )
        assert unread.json()["data"]["notifications"] == []

    @pytest.mark.asyncio
    async def test_delete(self, async_client, auth_headers, test_user_id):
        created = (await send(async_client, auth_headers, test_user_id)).json()["data"]
        notification_id = created["notification"]["id"]

        response = await async_client.delete(f"{BASE}/{notification_id}", headers=auth_headers)
        again = await async_client.delete(f"{BASE}/{notification_id}", headers=auth_headers)

        assert response.status_code == 200
        assert again.status_code == 404


class TestPreferences:
    @pytest.mark.asyncio
    async def test_defaults_without_settings(self, async_client, auth_headers, test_user_id):
        response = await async_client.get(f"{BASE}/preferences", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user_id"] == test_user_id
        assert data["push_enabled"] is True
        assert data["email_enabled"] is True
        assert data["sms_enabled"] is False

    @pytest.mark.asyncio
    async def test_partial_update(self, async_client, auth_headers):
        await async_client.patch(
            f"{BASE}/preferences",
            json={"sms_enabled": True, "phone_number": "+15557654321"},
            headers=auth_headers,
        )
        response = await async_client.patch(
            f"{BASE}/preferences", json={"email_enabled": False}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["sms_enabled"] is True
        assert data["phone_number"] == "+15557654321"
        assert data["email_enabled"] is False
        assert data["push_enabled"] is None

    @pytest.mark.asyncio
    async def test_invalid_phone_rejected(self, async_client, auth_headers):
        response = await async_client.patch(
            f"{BASE}/preferences", json={"phone_number": "555-1234"}, headers=auth_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_push_subscription_enables_push(self, async_client, auth_headers):
        await async_client.patch(
            f"{BASE}/preferences", json={"push_enabled": False}, headers=auth_headers
        )

        response = await async_client.post(
            f"{BASE}/push-subscription", json={"subscription": SUBSCRIPTION}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Push subscription updated"

        prefs = (await async_client.get(f"{BASE}/preferences", headers=auth_headers)).json()
        assert prefs["data"]["push_enabled"] is True
        assert prefs["data"]["push_subscription"]["endpoint"] == SUBSCRIPTION["endpoint"]

    @pytest.mark.asyncio
    async def test_push_subscription_required(self, async_client, auth_headers):
        response = await async_client.post(
            f"{BASE}/push-subscription", json={}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Push subscription required"
