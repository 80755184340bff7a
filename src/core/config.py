"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

# Quiet period after the last album member before the album is flushed.
DEFAULT_DEBOUNCE_SECONDS = 2.0


@dataclass(frozen=True)
class WebhookEndpoint:
    """Delivery target: primary and secondary URL sharing one API key."""

    primary_url: str
    secondary_url: str
    api_key: str
