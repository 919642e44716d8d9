import logging

import stripe
from starlette.concurrency import run_in_threadpool

from ..core.errors import AuthenticationRequired, ConfigurationError, KreitError, UpstreamError
from ..core.metrics import UPSTREAM_FAILURES
from ..core.security import Caller

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Payments are not configured."
SIGN_IN_REQUIRED = "You must be signed in to upgrade."
NO_CHECKOUT_URL = "Stripe did not return a checkout URL."
CHECKOUT_FAILED = "Unable to start checkout. Please try again shortly."

class CheckoutService:
    """
    Starts a Stripe-hosted subscription checkout for the premium plan.
    """
    def __init__(self, secret_key: str | None, price_id: str | None):
        self.secret_key = secret_key
        self.price_id = price_id

    def _create_session(self, user_id: str, origin: str):
        return stripe.checkout.Session.create(
            api_key=self.secret_key,
            mode="subscription",
            client_reference_id=user_id,
            line_items=[{"price": self.price_id, "quantity": 1}],
            metadata={"user_id": user_id},
            success_url=f"{origin}/account?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{origin}?checkout=cancelled",
        )

    async def create_checkout(self, caller: Caller, origin: str) -> str:
        """Returns the hosted checkout URL to redirect the caller to."""
        if not self.secret_key:
            raise ConfigurationError(NOT_CONFIGURED, detail="Missing STRIPE_SECRET_KEY")
        if not self.price_id:
            raise ConfigurationError(NOT_CONFIGURED, detail="Missing STRIPE_PRICE_ID")
        if caller.user_id is None:
            raise AuthenticationRequired(SIGN_IN_REQUIRED)

        origin = origin.rstrip("/")
        try:
            session = await run_in_threadpool(self._create_session, caller.user_id, origin)
        except stripe.StripeError as exc:
            UPSTREAM_FAILURES.labels(upstream="stripe").inc()
            logger.error("Stripe checkout creation failed: %s", exc)
            raise KreitError(CHECKOUT_FAILED, detail=str(exc)) from exc

        url = getattr(session, "url", None)
        if not url:
            raise UpstreamError(NO_CHECKOUT_URL, detail=f"Checkout session {getattr(session, 'id', '?')} has no URL")
        logger.info("Checkout session %s created for user %s", getattr(session, "id", "?"), caller.user_id)
        return url
