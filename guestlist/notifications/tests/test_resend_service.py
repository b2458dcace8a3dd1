"""Unit tests for ResendNotificationService, mocking the HTTP client."""

from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

import httpx
import pytest

from guestlist.guests.dtos import GuestStatus
from guestlist.notifications.resend_service import RESEND_EMAILS_URL, ResendNotificationService


@dataclass
class MockConfig:
    resend_api_key: str = "re_test_key"
    emails_from: str = "info@example.com"
    event_name: str = "Anna & Ben's wedding"


class MockResponse:
    def __init__(self, *, json_data=None, status_code=200):
        self._json_data = json_data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}",
                request=httpx.Request("POST", RESEND_EMAILS_URL),
                response=httpx.Response(self.status_code),
            )

    def json(self):
        return self._json_data


class MockHttpClient:
    """
    Replaces httpx.AsyncClient as the http_client_class.

    The service calls self._http_client_class() and uses the result as an
    async context manager, so __call__ returns self.
    """

    def __init__(self, response: MockResponse | None = None):
        self.post_calls: list[dict] = []
        self._response = response or MockResponse(json_data={"id": "email-123"})

    def __call__(self):
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def post(self, url, headers=None, json=None):
        self.post_calls.append({"url": url, "headers": headers, "json": json})
        return self._response


@pytest.mark.asyncio
async def test_send_rsvp_confirmation_posts_to_resend():
    client = MockHttpClient()
    service = ResendNotificationService(config=MockConfig(), http_client_class=client)

    await service.send_rsvp_confirmation(
        to_address="jane@example.com",
        guest_name="Jane",
        status=GuestStatus.CONFIRMED,
        added_guests=2,
        guest_id=uuid4(),
    )

    assert len(client.post_calls) == 1
    call = client.post_calls[0]
    assert call["url"] == RESEND_EMAILS_URL
    assert call["headers"]["Authorization"] == "Bearer re_test_key"
    assert call["json"]["to"] == ["jane@example.com"]
    assert call["json"]["from"] == "info@example.com"
    assert call["json"]["subject"] == "Thank you for your RSVP!"
    assert "2 more guest(s)" in call["json"]["text"]
    assert "Anna & Ben's wedding" in call["json"]["html"]


@pytest.mark.asyncio
async def test_send_rsvp_decline_uses_decline_template():
    client = MockHttpClient()
    service = ResendNotificationService(config=MockConfig(), http_client_class=client)

    await service.send_rsvp_confirmation(
        to_address="jane@example.com", guest_name="Jane", status=GuestStatus.DECLINED
    )

    assert client.post_calls[0]["json"]["subject"] == "We're sorry you can't make it"


@pytest.mark.asyncio
async def test_send_reminder_includes_deadline():
    client = MockHttpClient()
    service = ResendNotificationService(config=MockConfig(), http_client_class=client)

    await service.send_reminder(
        to_address="jane@example.com",
        guest_name="Jane",
        rsvp_deadline=datetime(2026, 7, 15),
    )

    body = client.post_calls[0]["json"]["text"]
    assert "by July 15, 2026" in body


@pytest.mark.asyncio
async def test_http_error_is_raised():
    client = MockHttpClient(MockResponse(status_code=500))
    service = ResendNotificationService(config=MockConfig(), http_client_class=client)

    with pytest.raises(httpx.HTTPStatusError):
        await service.send_reminder(to_address="jane@example.com", guest_name="Jane")
