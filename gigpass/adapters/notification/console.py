"""
Console notification adapter - Implements NotificationGateway protocol.

This module provides a console-based implementation of the domain's
notification port, logging codes to stdout for demo purposes.
"""

import logging

from gigpass.domain.ports import Channel

logger = logging.getLogger(__name__)

_LABELS = {Channel.EMAIL: "EMAIL", Channel.PHONE: "SMS"}


class ConsoleNotificationGateway:
    """
    Implements NotificationGateway protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    One instance per channel; the channel only selects the log label.
    """

    def __init__(self, channel: Channel) -> None:
        self.channel = channel

    def deliver(self, destination: str, code: str) -> bool:
        """
        Log the code to console (simulates email/SMS delivery).

        In production, this would be replaced with an SMTP or SMS provider
        adapter. Logged at INFO level to be visible in container logs.

        Args:
            destination: Email address or phone number
            code: 6-digit code

        Returns:
            Always True
        """
        logger.info("[%s] To: %s Code: %s", _LABELS[self.channel], destination, code)
        return True
