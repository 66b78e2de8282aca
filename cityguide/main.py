"""
cityguide.main.

FastAPI entrypoint for the city guide content service.

Responsibilities
----------------
• App initialization and background refresh lifecycle
• Health monitoring
• Event, article, partner and neighborhood queries
• Newsletter and form relays

Run with:

    uvicorn cityguide.main:create_app --factory
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from cityguide.configs.settings import Settings, get_settings
from cityguide.ingestion.orchestrator import RefreshOrchestrator, load_orchestrator_from_config
from cityguide.ingestion.store import ContentStore
from cityguide.monitoring.logging import configure_logging
from cityguide.query import (
    ArticleQuery,
    EventQuery,
    bucket_by_day,
    current_week_start,
    event_categories_in_use,
    featured_events,
    find_by_slug,
    find_event,
    global_search,
    pillar_articles,
    query_articles,
    query_events,
    related_articles,
)
from cityguide.relays import (
    EventSubmission,
    FormRelayClient,
    NewsletterClient,
    PartnerInquiry,
    build_event_payload,
    build_partner_payload,
)
from cityguide.schemas.content import ALL_FILTER, ArticleType, ContentKind, EventCategory

logger = logging.getLogger("cityguide.api")

router = APIRouter()


def _public(records) -> list[dict]:
    return [r.to_public() for r in records]


# ---------------------------------------------------------------------------
# APP FACTORY
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    orchestrator: RefreshOrchestrator | None = None,
    newsletter: NewsletterClient | None = None,
    form_relay: FormRelayClient | None = None,
) -> FastAPI:
    """
    Build the API application.

    Parameters
    ----------
    settings : Settings, optional
        Application settings; the cached settings when omitted.
    orchestrator : RefreshOrchestrator, optional
        Refresh orchestrator; built from the content sources config when omitted.
    newsletter : NewsletterClient, optional
        Newsletter client; built from settings when credentials are present.
    form_relay : FormRelayClient, optional
        Form relay client shared by both submission forms.

    Returns
    -------
    FastAPI
        The configured application.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    if orchestrator is None:
        orchestrator = load_orchestrator_from_config(settings.CONTENT_SOURCES_PATH, settings=settings)

    if newsletter is None and settings.newsletter_configured:
        newsletter = NewsletterClient(
            api_key=settings.BEEHIIV_API_KEY.get_secret_value(),
            publication_id=settings.BEEHIIV_PUBLICATION_ID,
            base_url=settings.BEEHIIV_BASE_URL,
            timeout=settings.RELAY_REQUEST_TIMEOUT,
        )
    form_relay = form_relay or FormRelayClient(timeout=settings.RELAY_REQUEST_TIMEOUT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start background refreshes on startup and stop them on shutdown."""
        orchestrator.start(run_immediately=settings.REFRESH_ON_STARTUP)
        yield
        await orchestrator.stop()
        await form_relay.close()
        if newsletter is not None:
            await newsletter.close()

    app = FastAPI(
        title="City Guide Content API",
        version="1.0.0",
        description="Sheet-backed events, articles, partners and neighborhoods.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.state.store = orchestrator.store
    app.state.newsletter = newsletter
    app.state.form_relay = form_relay

    app.include_router(router)
    return app


# ---------------------------------------------------------------------------
# DEPENDENCIES
# ---------------------------------------------------------------------------


def get_store(request: Request) -> ContentStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> RefreshOrchestrator:
    return request.app.state.orchestrator


# ---------------------------------------------------------------------------
# ROUTES
# ---------------------------------------------------------------------------


@router.get("/health", tags=["Monitoring"])
def health_check(orchestrator: RefreshOrchestrator = Depends(get_orchestrator)) -> dict:
    """
    Check API health and content freshness.

    Returns
    -------
    dict
        Service status plus one entry per held record set.
    """
    return {
        "status": "ok",
        "refreshing": orchestrator.running,
        "content": orchestrator.store.describe(),
        "refreshStats": orchestrator.get_execution_stats(),
    }


@router.get("/home", tags=["Content"])
def home(store: ContentStore = Depends(get_store)) -> dict:
    """Featured events, pillar articles and the category facets in use."""
    return {
        "featuredEvents": _public(featured_events(store.events)),
        "pillarArticles": _public(pillar_articles(store.articles)),
        "eventCategories": event_categories_in_use(store.events),
    }


@router.get("/events", tags=["Events"])
def list_events(
    search: str = "",
    category: str = ALL_FILTER,
    week: date | None = Query(default=None, description="Any date in the week; defaults to this week"),
    store: ContentStore = Depends(get_store),
) -> dict:
    """Events of one week, featured first, then chronological."""
    query = EventQuery(week_start=week or current_week_start(), search_text=search, category=category)
    return {
        "weekStart": query.week_start.isoformat(),
        "categories": EventCategory.filter_options(),
        "events": _public(query_events(store.events, query)),
    }


@router.get("/events/week", tags=["Events"])
def events_by_day(
    search: str = "",
    category: str = ALL_FILTER,
    week: date | None = None,
    store: ContentStore = Depends(get_store),
) -> dict:
    """The calendar view: seven day buckets, Monday first."""
    query = EventQuery(week_start=week or current_week_start(), search_text=search, category=category)
    buckets = bucket_by_day(query_events(store.events, query), query.week_start)
    return {
        "weekStart": query.week_start.isoformat(),
        "days": [
            {"date": key, "events": _public(bucket.events)} for key, bucket in buckets.items()
        ],
    }


@router.get("/events/{event_id}", tags=["Events"])
def get_event(event_id: str, store: ContentStore = Depends(get_store)) -> dict:
    event = find_event(store.events, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail=f"Event '{event_id}' not found")
    return event.to_public()


@router.get("/articles", tags=["Articles"])
def list_articles(
    search: str = "",
    type: str = ALL_FILTER,
    store: ContentStore = Depends(get_store),
) -> dict:
    """Explore articles, featured first."""
    query = ArticleQuery(search_text=search, type=type)
    return {
        "types": ArticleType.filter_options(),
        "articles": _public(query_articles(store.articles, query)),
    }


@router.get("/articles/{slug}", tags=["Articles"])
def get_article(slug: str, store: ContentStore = Depends(get_store)) -> dict:
    article = find_by_slug(store.articles, slug)
    if article is None:
        raise HTTPException(status_code=404, detail=f"Article '{slug}' not found")
    return article.to_public()


@router.get("/articles/{slug}/related", tags=["Articles"])
def get_related_articles(slug: str, store: ContentStore = Depends(get_store)) -> list[dict]:
    articles = store.articles
    article = find_by_slug(articles, slug)
    if article is None:
        raise HTTPException(status_code=404, detail=f"Article '{slug}' not found")
    return _public(related_articles(articles, article))


@router.get("/partners", tags=["Content"])
def list_partners(store: ContentStore = Depends(get_store)) -> list[dict]:
    return _public(store.partners)


@router.get("/neighborhoods", tags=["Content"])
def list_neighborhoods(store: ContentStore = Depends(get_store)) -> list[dict]:
    return _public(store.neighborhoods)


@router.get("/search", tags=["Content"])
def search(q: str = "", store: ContentStore = Depends(get_store)) -> dict:
    """Site-wide search; at most five events and five articles."""
    results = global_search(store.events, store.articles, q)
    return {"events": _public(results.events), "articles": _public(results.articles)}


# ---------------------------------------------------------------------------
# RELAY ENDPOINTS
# ---------------------------------------------------------------------------


@router.post("/api/subscribe", tags=["Relays"])
async def subscribe(request: Request) -> JSONResponse:
    """
    Subscribe an email address to the newsletter.

    Returns ``{"success": true}`` or a non-2xx ``{"error": ...}``.
    """
    try:
        body = await request.json()
    except ValueError:
        body = {}
    email = body.get("email") if isinstance(body, dict) else None

    if not email:
        return JSONResponse(status_code=400, content={"error": "Email is required"})

    newsletter: NewsletterClient | None = request.app.state.newsletter
    if newsletter is None:
        logger.error("Subscribe requested but the newsletter is not configured")
        return JSONResponse(status_code=503, content={"error": "Newsletter is not configured"})

    outcome = await newsletter.subscribe(email)
    if outcome.success:
        return JSONResponse(status_code=200, content={"success": True, "data": outcome.data})
    return JSONResponse(
        status_code=outcome.status_code,
        content={"error": outcome.error, "details": outcome.data},
    )


@router.api_route("/api/subscribe", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def subscribe_method_not_allowed() -> JSONResponse:
    return JSONResponse(status_code=405, content={"error": "Method not allowed"})


async def _relay(request: Request, endpoint: str | None, payload: dict) -> dict:
    if not endpoint:
        raise HTTPException(status_code=503, detail="Form relay is not configured")
    form_relay: FormRelayClient = request.app.state.form_relay
    if not await form_relay.submit(endpoint, payload):
        raise HTTPException(
            status_code=502,
            detail="There was an error submitting the form. Please try again.",
        )
    return {"success": True}


@router.post("/api/events/submit", tags=["Relays"])
async def submit_event(submission: EventSubmission, request: Request) -> dict:
    """Forward a visitor's event submission to the form relay."""
    settings: Settings = request.app.state.settings
    return await _relay(request, settings.EVENT_SUBMISSION_ENDPOINT, build_event_payload(submission))


@router.post("/api/partners/inquire", tags=["Relays"])
async def submit_partner_inquiry(inquiry: PartnerInquiry, request: Request) -> dict:
    """Forward a partnership inquiry to the form relay."""
    settings: Settings = request.app.state.settings
    return await _relay(request, settings.PARTNER_INQUIRY_ENDPOINT, build_partner_payload(inquiry))


# ---------------------------------------------------------------------------
# ADMIN
# ---------------------------------------------------------------------------


@router.post("/admin/refresh/{kind}", tags=["Admin"])
async def refresh_kind(kind: str, orchestrator: RefreshOrchestrator = Depends(get_orchestrator)) -> dict:
    """Refresh one content kind now; joins a refresh already running."""
    try:
        content_kind = ContentKind(kind)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown content kind '{kind}'")
    result = await orchestrator.refresh(content_kind)
    return result.to_dict()
