from datetime import datetime
import math
from pydantic import Field, field_validator, model_validator
import dateutil.parser
import dateutil.tz
from .document import Document

def compute_discount_percentage(original_price: float, discounted_price: float) -> int:
    """Percentage saved, rounded half up to the nearest integer."""
    return math.floor((original_price - discounted_price) / original_price * 100 + 0.5)

def parse_date(value):
    """Accept client date strings in any format dateutil understands. Naive values are taken as UTC."""
    if isinstance(value, str):
        value = dateutil.parser.parse(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=dateutil.tz.tzutc())
    return value

class Deal(Document):
    title: str
    description: str
    original_price: float = Field(gt=0)
    discounted_price: float = Field(ge=0)
    discount_percentage: int = 0
    affiliate_link: str
    image_url: str = ''
    category: str = 'general'
    is_active: bool = True
    start_date: datetime
    end_date: datetime

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def _parse_dates(cls, value):
        return parse_date(value)

    @model_validator(mode='after')
    def _derive_discount(self):
        # Always derived from the prices, whatever the client sent
        self.discount_percentage = compute_discount_percentage(self.original_price, self.discounted_price)
        return self

    def is_running(self, now: datetime) -> bool:
        return self.is_active and self.start_date <= now <= self.end_date

DEAL_REQUIRED_FIELDS = ['title', 'description', 'originalPrice', 'discountedPrice', 'affiliateLink', 'startDate', 'endDate']
DEAL_WRITABLE_FIELDS = ['title', 'description', 'originalPrice', 'discountedPrice', 'affiliateLink', 'imageUrl', 'category', 'isActive', 'startDate', 'endDate']
