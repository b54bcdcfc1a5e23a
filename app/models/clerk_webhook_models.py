from pydantic import BaseModel
from typing import Dict, Any


class ClerkWebhookEvent(BaseModel):
    """Envelope Clerk posts for user.created / user.updated / user.deleted"""

    data: Dict[str, Any]
    object: str
    type: str


class ClerkWebhookResponse(BaseModel):
    status: str
    event_type: str
    handled: bool
