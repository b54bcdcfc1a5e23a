from pydantic import BaseModel
from typing import Optional


class StripeWebhookEventResponse(BaseModel):
    """Acknowledgement for one Stripe delivery; Stripe itself only looks at the status code"""

    status: str  # "success" when handled or deliberately skipped, "ignored" when the event matches no booking
    message: str
    event_type: Optional[str] = None
    payment_id: Optional[str] = None
    processed: bool = False  # True only when this delivery moved a payment out of pending
