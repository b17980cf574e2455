from datetime import datetime
from typing import Literal
from pydantic import Field
from .document import Document

Status = Literal['draft', 'published']

class Product(Document):
    name: str
    slug: str
    image: str = ''
    description: str = ''
    affiliate_link: str = ''
    category: str = ''
    status: Status = 'draft'
    click_count: int = Field(0, ge=0)
    last_clicked_at: datetime | None = None

PRODUCT_REQUIRED_FIELDS = ['name', 'image', 'description', 'affiliateLink', 'category']
PRODUCT_WRITABLE_FIELDS = ['name', 'slug', 'image', 'description', 'affiliateLink', 'category', 'status']
