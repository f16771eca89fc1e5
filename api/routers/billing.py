"""Billing endpoints - checkout for signed-in users and the Stripe webhook."""

from fastapi import APIRouter, Depends, Request

from api.auth import require_bearer_token, verify_api_key
from api.dependencies import get_billing_service
from services import BillingService
from services.models import CheckoutResponse

router = APIRouter(dependencies=[Depends(verify_api_key)])

# Stripe authenticates with its signature header, not the API key.
webhook_router = APIRouter()


@router.post("/billing/checkout", response_model=CheckoutResponse)
async def create_checkout(
    request: Request,
    token: str = Depends(require_bearer_token),
    svc: BillingService = Depends(get_billing_service),
):
    """Start a Pro subscription checkout for the bearer-token user."""
    url = svc.create_checkout(token, origin=request.headers.get("origin"))
    return CheckoutResponse(url=url)


@webhook_router.post("/stripe-webhook")
async def stripe_webhook(
    request: Request,
    svc: BillingService = Depends(get_billing_service),
):
    payload = await request.body()
    return svc.handle_webhook(payload, request.headers.get("stripe-signature"))
