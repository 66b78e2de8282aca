"""
Form relays for event submissions and partner inquiries.

Both forms are forwarded as JSON to a third-party form endpoint. The
payload shapes are fixed by the inbox that receives them; blank optional
fields are spelled out ("Not provided", "None", ...) so the resulting
email reads cleanly. The event payload also carries a tab-separated row
in sheet column order for copy-paste into the events tab.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"
NONE_SELECTED = "None selected"
NONE = "None"

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


class FormModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class EventSubmission(FormModel):
    """An event suggested by a visitor."""

    submitter_name: str = Field(alias="submitterName")
    submitter_email: str = Field(alias="submitterEmail")
    submitter_phone: str = Field(default="", alias="submitterPhone")
    title: str
    venue_name: str = Field(default="", alias="venueName")
    venue_address: str = Field(default="", alias="venueAddress")
    neighborhood: str = ""
    start_date: str = Field(alias="startDate")
    start_time: str = Field(default="", alias="startTime")
    end_date: str = Field(default="", alias="endDate")
    end_time: str = Field(default="", alias="endTime")
    all_day: bool = Field(default=False, alias="allDay")
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    cost_type: str = Field(default="paid", alias="costType")
    cost_details: str = Field(default="", alias="costDetails")
    short_description: str = Field(default="", alias="shortDescription")
    website: str = ""
    ticket_link: str = Field(default="", alias="ticketLink")
    notes: str = ""


class PartnerInquiry(FormModel):
    """A partnership/advertising inquiry."""

    full_name: str = Field(alias="fullName")
    email_address: str = Field(alias="emailAddress")
    phone: str = ""
    company_name: str = Field(alias="companyName")
    role: str = ""
    website: str = ""
    social_handles: str = Field(default="", alias="socialHandles")
    budget: str = ""
    goals: List[str] = Field(default_factory=list)
    timing: str = ""
    partnership_interest: List[str] = Field(default_factory=list, alias="partnershipInterest")
    notes: str = ""
    preferred_contact: str = Field(default="", alias="preferredContact")
    heard_about: str = Field(default="", alias="heardAbout")
    city: str = ""


# ============================================================================
# PAYLOAD BUILDERS
# ============================================================================


def slugify(title: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to '-', trim dashes."""
    return _SLUG_SEPARATORS.sub("-", title.lower()).strip("-")


def format_sheet_datetime(day: str, time_of_day: str, all_day: bool) -> str:
    """Format a form date and time as the sheet's ``YYYY-MM-DDTHH:MM:SS``."""
    if not day:
        return ""
    if all_day:
        return f"{day}T00:00:00"
    return f"{day}T{time_of_day or '00:00'}:00"


def build_sheet_row(submission: EventSubmission) -> str:
    """Tab-separated row in events tab column order, not featured."""
    start = format_sheet_datetime(submission.start_date, submission.start_time, submission.all_day)
    end = format_sheet_datetime(
        submission.end_date or submission.start_date,
        submission.end_time,
        submission.all_day,
    )
    columns = [
        submission.title,
        slugify(submission.title),
        start,
        end,
        "TRUE" if submission.all_day else "FALSE",
        submission.venue_name,
        submission.neighborhood,
        submission.category,
        ", ".join(submission.tags),
        submission.cost_type,
        submission.cost_details,
        submission.short_description,
        "FALSE",
    ]
    return "\t".join(columns)


def build_event_payload(submission: EventSubmission) -> Dict[str, Any]:
    """Build the relay payload for an event submission."""
    tags = ", ".join(submission.tags)
    return {
        "_subject": f"Event Submission: {submission.title}",
        "submitterName": submission.submitter_name,
        "submitterEmail": submission.submitter_email,
        "submitterPhone": submission.submitter_phone or NOT_PROVIDED,
        "eventTitle": submission.title,
        "venueName": submission.venue_name,
        "venueAddress": submission.venue_address or NOT_PROVIDED,
        "neighborhood": submission.neighborhood,
        "startDate": submission.start_date,
        "startTime": "All Day" if submission.all_day else submission.start_time,
        "endDate": submission.end_date or submission.start_date,
        "endTime": "All Day" if submission.all_day else submission.end_time,
        "allDay": "Yes" if submission.all_day else "No",
        "category": submission.category,
        "tags": tags or NONE,
        "costType": submission.cost_type,
        "costDetails": submission.cost_details,
        "shortDescription": submission.short_description,
        "website": submission.website or NOT_PROVIDED,
        "ticketLink": submission.ticket_link or NOT_PROVIDED,
        "notes": submission.notes or NONE,
        "googleSheetsRow": build_sheet_row(submission),
    }


def build_partner_payload(inquiry: PartnerInquiry) -> Dict[str, Any]:
    """Build the relay payload for a partner inquiry."""
    return {
        "_subject": f"Partnership Inquiry from {inquiry.company_name}",
        "fullName": inquiry.full_name,
        "email": inquiry.email_address,
        "phone": inquiry.phone or NOT_PROVIDED,
        "companyName": inquiry.company_name,
        "role": inquiry.role,
        "website": inquiry.website or NOT_PROVIDED,
        "socialHandles": inquiry.social_handles or NOT_PROVIDED,
        "budget": inquiry.budget,
        "timing": inquiry.timing,
        "goals": ", ".join(inquiry.goals) if inquiry.goals else NONE_SELECTED,
        "partnershipInterest": (
            ", ".join(inquiry.partnership_interest) if inquiry.partnership_interest else NONE_SELECTED
        ),
        "preferredContact": inquiry.preferred_contact or NOT_SPECIFIED,
        "heardAbout": inquiry.heard_about or NOT_SPECIFIED,
        "city": inquiry.city or NOT_SPECIFIED,
        "notes": inquiry.notes,
    }


# ============================================================================
# CLIENT
# ============================================================================


class FormRelayClient:
    """
    Posts form payloads to a form-relay endpoint.

    Success is binary: any 2xx is success, everything else (including
    network errors) is failure. Nothing is retried.
    """

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(headers={"Accept": "application/json"})
        return self._client

    async def submit(self, endpoint: str, payload: Dict[str, Any]) -> bool:
        """POST a payload as JSON; return whether the relay accepted it."""
        try:
            response = await self._get_client().post(endpoint, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"Form relay request failed: {e!r}")
            return False

        if not response.is_success:
            logger.error(f"Form relay rejected submission: HTTP {response.status_code}")
        return response.is_success

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
