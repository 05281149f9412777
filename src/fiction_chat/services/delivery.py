"""Best-effort live delivery of persisted messages."""
from __future__ import annotations

import logging

from fiction_chat.schemas.frames import new_message_frame
from fiction_chat.schemas.message import MessageOut
from fiction_chat.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class DeliveryDispatcher:
    """Pushes new messages to the recipient's live session, if there is one.

    Delivery is at-most-once and never raises: the message is already stored,
    so an offline recipient simply sees it on the next history fetch.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    async def deliver(self, message: MessageOut, recipient_id: str) -> bool:
        """Push ``message`` to ``recipient_id``.

        Returns:
            True if the frame was handed to an open connection, False otherwise.
        """
        recipient_id = str(recipient_id)
        connection = self.registry.lookup(recipient_id)
        if connection is None or not connection.is_open:
            logger.debug(
                "Recipient %s not connected; message %s left for history", recipient_id, message.id
            )
            return False

        try:
            await connection.send_json(new_message_frame(message, recipient_id))
        except Exception as err:
            logger.debug("Failed to push message %s to %s: %s", message.id, recipient_id, err)
            self.registry.unregister(recipient_id, connection)
            return False

        logger.info("Delivered message %s to %s", message.id, recipient_id)
        return True
