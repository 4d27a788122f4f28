"""Request pacing for paginated API calls.

Spreads page requests out with jittered delays so a long playlist does
not burst through the API quota.
"""

import asyncio
import random
import logging

logger = logging.getLogger(__name__)


class Humanizer:
    """Adds jittered delays between page requests."""

    def __init__(self, base_delay: float = 0.5, pause_every: int = 5):
        self.base_delay = base_delay
        self.pause_every = pause_every
        self._request_count = 0

    async def delay(self):
        """Wait a randomized duration before the next request.

        The first request goes out immediately. Every ``pause_every``
        requests a longer pause is added. A base delay of 0 disables pacing.
        """
        self._request_count += 1
        if self._request_count == 1 or self.base_delay <= 0:
            return

        # Base jitter: 0.5x to 1.5x the base delay
        wait = self.base_delay * random.uniform(0.5, 1.5)

        if self.pause_every and self._request_count % self.pause_every == 0:
            wait += self.base_delay * random.uniform(2.0, 4.0)
            logger.debug("Long pause: %.1fs", wait)

        logger.debug("Paced delay: %.2fs (request #%d)", wait, self._request_count)
        await asyncio.sleep(wait)

    @property
    def request_count(self) -> int:
        return self._request_count

    def reset(self):
        """Reset request counter for a new fetch."""
        self._request_count = 0
