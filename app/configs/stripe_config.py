import stripe
from decimal import Decimal
from typing import Optional
from app.configs.app_settings import settings

stripe.api_key = settings.STRIPE_SECRET_KEY


class PaymentConstants:
    CURRENCY = "usd"
    PRODUCT_NAME = "ArtisanHub Booking"


def to_cents(amount: Decimal) -> int:
    """Stripe wants integer minor units"""
    return int((Decimal(amount) * 100).to_integral_value())


class StripeConfig:
    """Simple wrapper for the Stripe calls the booking flow makes"""

    @staticmethod
    def create_checkout_session(
        amount_cents: int,
        currency: str = PaymentConstants.CURRENCY,
        success_url: str = "",
        cancel_url: str = "",
        metadata: Optional[dict] = None,
        customer_email: Optional[str] = None,
    ) -> stripe.checkout.Session:
        """Create a one-off Stripe checkout session for a booking total"""
        metadata = metadata or {}

        session_config = {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": {"name": metadata.get("product_name", PaymentConstants.PRODUCT_NAME)},
                        "unit_amount": amount_cents,
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
            # the payment id travels on the intent too, so payment_intent.* events can be matched back to the booking
            "payment_intent_data": {"metadata": metadata},
        }

        if customer_email:
            session_config["customer_email"] = customer_email
            session_config["payment_intent_data"]["receipt_email"] = customer_email

        return stripe.checkout.Session.create(**session_config)

    @staticmethod
    def construct_webhook_event(payload: bytes, sig_header: str) -> stripe.Event:
        """Verify the Stripe-Signature header and parse the event"""
        return stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
