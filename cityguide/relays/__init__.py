"""Outbound relays: newsletter subscriptions and form submissions."""

from .newsletter import NewsletterClient, SubscribeOutcome
from .submissions import (
    EventSubmission,
    FormRelayClient,
    PartnerInquiry,
    build_event_payload,
    build_partner_payload,
)

__all__ = [
    "NewsletterClient",
    "SubscribeOutcome",
    "EventSubmission",
    "FormRelayClient",
    "PartnerInquiry",
    "build_event_payload",
    "build_partner_payload",
]
