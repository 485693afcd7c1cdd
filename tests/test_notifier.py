import uuid
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import pytest
import requests

from userservice.core.notifier import NotifierService
from userservice.schemas.notify import FriendRequestNotification


def make_notification():
    return FriendRequestNotification(
        sender_id=uuid.uuid4(),
        receiver_id=uuid.uuid4(),
        sender_name="Alice",
        receiver_name="Bob",
        created_at=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.mark.asyncio
async def test_posts_camel_case_payload():
    notification = make_notification()
    notifier = NotifierService(url="http://notify.local/api/notifications", timeout=2)

    with patch("userservice.core.notifier.requests.post") as post:
        post.return_value = Mock(status_code=201)
        delivered = await notifier.notify_friend_request(notification)

    assert delivered is True
    post.assert_called_once()
    assert post.call_args.args[0] == "http://notify.local/api/notifications"
    assert post.call_args.kwargs["timeout"] == 2
    body = post.call_args.kwargs["json"]
    assert body == {
        "senderId": str(notification.sender_id),
        "receiverId": str(notification.receiver_id),
        "senderName": "Alice",
        "receiverName": "Bob",
        "createdAt": body["createdAt"],
        "typeDto": "Invite",
    }
    assert body["createdAt"].startswith("2024-03-01T12:00:00")


@pytest.mark.asyncio
async def test_connection_error_is_swallowed():
    notifier = NotifierService(url="http://notify.local/api/notifications")

    with patch("userservice.core.notifier.requests.post", side_effect=requests.ConnectionError("down")):
        delivered = await notifier.notify_friend_request(make_notification())

    assert delivered is False


@pytest.mark.asyncio
async def test_error_status_is_swallowed():
    notifier = NotifierService(url="http://notify.local/api/notifications")
    response = Mock()
    response.raise_for_status.side_effect = requests.HTTPError("502 Bad Gateway")

    with patch("userservice.core.notifier.requests.post", return_value=response):
        delivered = await notifier.notify_friend_request(make_notification())

    assert delivered is False


@pytest.mark.asyncio
async def test_disabled_without_url():
    notifier = NotifierService(url="")

    with patch("userservice.core.notifier.requests.post") as post:
        delivered = await notifier.notify_friend_request(make_notification())

    assert delivered is False
    post.assert_not_called()
