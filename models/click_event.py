from datetime import datetime
from pydantic import Field
from .document import Document, utc_now

class ClickEvent(Document):
    """A single traversal of a product's affiliate redirect. Never updated once written."""
    product_id: str
    product_slug: str
    user_ip: str = Field('unknown', alias='userIP')
    user_agent: str = 'unknown'
    referrer: str = 'direct'
    timestamp: datetime = Field(default_factory=utc_now)
