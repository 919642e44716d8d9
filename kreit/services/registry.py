import logging
from dataclasses import dataclass
from datetime import timedelta

from ..core.config import Settings
from ..core.errors import ConfigurationError
from ..data.base import PropertyDataClient, PropertyStore
from ..data.property_client import property_client
from ..data.store import property_store
from ..models.base import InsightsModel
from ..models.mock_model import MockInsightsModel
from ..models.openai_model import OpenAIInsightsModel, UnconfiguredInsightsModel
from .checkout_service import CheckoutService
from .score_service import ScoreService

logger = logging.getLogger(__name__)

@dataclass
class Services:
    """Long-lived collaborators, built once per process and shared by all requests."""
    store: PropertyStore
    properties: PropertyDataClient
    insights: InsightsModel
    scores: ScoreService
    checkout: CheckoutService

def insights_model(settings: Settings) -> InsightsModel:
    if settings.INSIGHTS_PROVIDER == "mock":
        return MockInsightsModel()
    missing = settings.missing_credentials("insights")
    if missing:
        return UnconfiguredInsightsModel(missing)
    return OpenAIInsightsModel(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        temperature=settings.OPENAI_TEMPERATURE,
        max_chars=settings.AI_PAYLOAD_MAX_CHARS,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

def build_services(settings: Settings) -> Services:
    """
    Validates credentials up front. In prod a gap is fatal; elsewhere the
    affected collaborator answers every call with a ConfigurationError.
    """
    missing = settings.missing_credentials()
    if missing:
        if settings.ENV == "prod":
            raise ConfigurationError(detail=f"Missing required environment variable(s): {', '.join(missing)}")
        logger.warning("Running with missing credentials: %s", ", ".join(missing))

    store = property_store(settings)
    properties = property_client(settings)
    insights = insights_model(settings)
    return Services(
        store=store,
        properties=properties,
        insights=insights,
        scores=ScoreService(store, properties, insights, freshness=timedelta(days=settings.CACHE_FRESHNESS_DAYS)),
        checkout=CheckoutService(settings.STRIPE_SECRET_KEY, settings.STRIPE_PRICE_ID),
    )
