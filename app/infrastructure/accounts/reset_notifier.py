"""
Adapter: Password reset link delivery.

Email transport is not part of this service. The shipped notifier
records that a link was issued; the link itself carries the secret
token and is never logged.
"""

import logging

from app.domain.accounts.ports import ResetLinkNotifier
from app.shared.logging import mask_secret

logger = logging.getLogger(__name__)


class LoggingResetLinkNotifier(ResetLinkNotifier):
    """ResetLinkNotifier that only logs the delivery request."""

    def send_reset_link(self, email: str, reset_link: str) -> None:
        logger.info(
            "Password reset link issued for %s (link ends %s)",
            email,
            mask_secret(reset_link),
        )
