"""Billing service - Stripe checkout sessions and subscription webhooks.

Checkout runs on behalf of a signed-in user; webhooks run server-side
with the service-role key and keep each profile's plan, subscription
status and period end in sync with Stripe.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

import stripe

from config_loader import get_site_url, get_stripe_settings

from .base_service import BaseService
from .exceptions import AuthenticationError, BackendError, ConfigurationError, WebhookError
from .models import Plan

logger = logging.getLogger(__name__)


def _field(obj: Any, key: str) -> Any:
    """Read a key from a Stripe object or plain dict, None if absent."""
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def _period_end_iso(timestamp: int | None) -> str | None:
    if not timestamp:
        return None
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).isoformat()


class BillingService(BaseService):
    """Creates checkout sessions and applies subscription webhooks."""

    uses_service_role = True

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def stripe_settings(self) -> dict:
        return get_stripe_settings(self.config)

    def _request_options(self) -> dict:
        """Per-call API key and pinned API version.

        Raises:
            ConfigurationError: If STRIPE_SECRET_KEY is not configured.
        """
        secret_key = self.stripe_settings.get("secret_key")
        if not secret_key:
            raise ConfigurationError("STRIPE_SECRET_KEY is not set")
        return {
            "api_key": secret_key,
            "stripe_version": self.stripe_settings.get("api_version", "2023-10-16"),
        }

    # =========================================================================
    # Checkout
    # =========================================================================

    def create_checkout(self, access_token: str, origin: str | None = None) -> str:
        """Start a Pro subscription checkout for the user behind a token.

        Args:
            access_token: The user's bearer token.
            origin: Request origin, used when no site URL is configured.

        Returns:
            The hosted checkout URL.

        Raises:
            AuthenticationError: If the token does not resolve to a user with an email.
            ProfileNotFoundError: If the user has no profile row.
            BackendError: If Stripe or the database call fails.
        """
        options = self._request_options()
        user = self.backend.get_user(access_token)
        user_id = str(user.id)
        email = getattr(user, "email", None)
        if not email:
            raise AuthenticationError("User not authenticated or email not available")

        profile = self.backend.get_profile(user_id)
        logger.info("Creating checkout for user %s", user_id)

        customer_id = profile.stripe_customer_id
        try:
            if not customer_id:
                customer = stripe.Customer.create(
                    email=email, metadata={"user_id": user_id}, **options
                )
                customer_id = customer["id"]
                self.backend.update_profiles(
                    "user_id", user_id, {"stripe_customer_id": customer_id}
                )
                logger.info("Created Stripe customer %s", customer_id)
            else:
                logger.debug("Reusing Stripe customer %s", customer_id)

            site_url = get_site_url(self.config, origin)
            session = stripe.checkout.Session.create(
                customer=customer_id,
                mode="subscription",
                line_items=[self._line_item()],
                success_url=f"{site_url}/dashboard?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{site_url}/pricing",
                metadata={"user_id": user_id},
                **options,
            )
        except stripe.StripeError as e:
            logger.error("Stripe checkout failed: %s", e)
            raise BackendError("stripe.checkout", str(e)) from e

        logger.info("Checkout session %s created", session["id"])
        return session["url"]

    def _line_item(self) -> dict:
        """Configured price id, or an inline monthly price."""
        settings = self.stripe_settings
        if settings.get("price_pro"):
            return {"price": settings["price_pro"], "quantity": 1}
        return {
            "price_data": {
                "currency": settings.get("currency", "usd"),
                "product_data": {
                    "name": settings.get("product_name", "Resume Builder Pro"),
                    "description": settings.get("product_description", ""),
                },
                "unit_amount": int(settings.get("unit_amount", 2000)),
                "recurring": {"interval": "month"},
            },
            "quantity": 1,
        }

    # =========================================================================
    # Webhooks
    # =========================================================================

    def handle_webhook(self, payload: bytes | str, signature: str | None) -> dict:
        """Verify and apply a Stripe webhook event.

        Args:
            payload: Raw request body.
            signature: Value of the Stripe-Signature header.

        Returns:
            {"received": True, "type": <event type>}

        Raises:
            WebhookError: If the signature is missing or invalid, or the
                payload is not a JSON event.
            ConfigurationError: If the webhook secret is not configured.
        """
        webhook_secret = self.stripe_settings.get("webhook_secret")
        if not webhook_secret:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET is not set")
        if not signature:
            raise WebhookError("No Stripe signature found")

        body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        try:
            stripe.WebhookSignature.verify_header(body, signature, webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed: %s", e)
            raise WebhookError("Webhook signature verification failed") from e

        try:
            event = json.loads(body)
        except json.JSONDecodeError as e:
            raise WebhookError("Webhook payload is not valid JSON") from e

        event_type = event.get("type", "")
        obj = event.get("data", {}).get("object", {})
        logger.info("Stripe event %s", event_type)

        if event_type == "checkout.session.completed":
            self._on_checkout_completed(obj)
        elif event_type == "customer.subscription.updated":
            self._on_subscription_updated(obj)
        elif event_type == "customer.subscription.deleted":
            self._on_subscription_deleted(obj)
        elif event_type == "invoice.payment_failed":
            # Stripe's own dunning retries the charge.
            logger.warning("Payment failed for customer %s", obj.get("customer"))
        else:
            logger.info("Unhandled event type: %s", event_type)

        return {"received": True, "type": event_type}

    def _on_checkout_completed(self, session: dict) -> None:
        if session.get("mode") != "subscription" or not session.get("subscription"):
            logger.info("Ignoring non-subscription checkout %s", session.get("id"))
            return

        customer_id = session.get("customer") if isinstance(session.get("customer"), str) else None
        email = (session.get("customer_details") or {}).get("email") or session.get("customer_email")

        try:
            subscription = stripe.Subscription.retrieve(
                session["subscription"], **self._request_options()
            )
        except stripe.StripeError as e:
            logger.error("Could not retrieve subscription %s: %s", session["subscription"], e)
            raise BackendError("stripe.subscription.retrieve", str(e)) from e

        values = {
            "plan": Plan.PRO.value,
            "sub_status": _field(subscription, "status"),
            "current_period_end": _period_end_iso(_field(subscription, "current_period_end")),
        }

        if customer_id and self.backend.find_profile("stripe_customer_id", customer_id):
            self.backend.update_profiles("stripe_customer_id", customer_id, values)
            logger.info("Profile upgraded by customer id %s", customer_id)
            return

        if email:
            if customer_id:
                values["stripe_customer_id"] = customer_id
            self.backend.update_profiles("email", email, values)
            logger.info("Profile upgraded by email %s", email)
        else:
            logger.warning("Checkout %s has no matching profile", session.get("id"))

    def _on_subscription_updated(self, subscription: dict) -> None:
        status = subscription.get("status")
        values = {
            "sub_status": status,
            "current_period_end": _period_end_iso(subscription.get("current_period_end")),
            "plan": Plan.PRO.value if status == "active" else Plan.FREE.value,
        }
        self._update_by_customer(subscription.get("customer"), values)

    def _on_subscription_deleted(self, subscription: dict) -> None:
        values = {"plan": Plan.FREE.value, "sub_status": "canceled", "current_period_end": None}
        self._update_by_customer(subscription.get("customer"), values)

    def _update_by_customer(self, customer_id: str | None, values: dict) -> None:
        """Update by Stripe customer id, falling back to the customer's email."""
        if not customer_id:
            logger.warning("Subscription event without a customer id")
            return

        try:
            updated = self.backend.update_profiles("stripe_customer_id", customer_id, values)
        except BackendError as e:
            logger.error("Update by customer id %s failed: %s", customer_id, e)
            updated = []
        if updated:
            logger.info("Subscription synced for customer %s", customer_id)
            return

        try:
            customer = stripe.Customer.retrieve(customer_id, **self._request_options())
        except stripe.StripeError as e:
            logger.error("Failed to retrieve customer %s: %s", customer_id, e)
            return

        email = _field(customer, "email")
        if _field(customer, "deleted") or not email:
            logger.warning("No email fallback for customer %s", customer_id)
            return

        self.backend.update_profiles("email", email, {**values, "stripe_customer_id": customer_id})
        logger.info("Subscription synced by email %s", email)
