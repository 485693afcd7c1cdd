import asyncio
import logging
from typing import Optional

import requests

from userservice.core.config import settings
from userservice.schemas.notify import FriendRequestNotification

logger = logging.getLogger(__name__)


class NotifierService:
    """Best-effort delivery of friend request notifications to an external service"""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url if url is not None else settings.NOTIFIER_URL
        self.timeout = timeout if timeout is not None else settings.NOTIFIER_TIMEOUT_SECONDS

    def _post(self, payload: dict) -> requests.Response:
        response = requests.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response

    async def notify_friend_request(self, notification: FriendRequestNotification) -> bool:
        """Send the notification; failures are logged and reported as False, never raised"""
        if not self.url:
            logger.debug("Notifier URL not configured, skipping friend request notification")
            return False

        payload = notification.to_payload()
        try:
            await asyncio.get_running_loop().run_in_executor(None, lambda: self._post(payload))
        except requests.RequestException as e:
            logger.warning(
                f"Failed to deliver friend request notification {payload['senderId']} -> "
                f"{payload['receiverId']}: {e}"
            )
            return False

        logger.info(f"Friend request notification sent: {payload['senderId']} -> {payload['receiverId']}")
        return True


# Global notifier instance
notifier_service = NotifierService()


async def get_notifier() -> NotifierService:
    """Dependency to get the notifier"""
    return notifier_service
