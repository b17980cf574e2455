from pydantic import Field
from .document import Document
from .product import Status

class BlogPost(Document):
    title: str
    slug: str
    content: str = ''
    cover_image: str = ''
    tags: list[str] = Field(default_factory=list)
    status: Status = 'draft'

POST_REQUIRED_FIELDS = ['title', 'content', 'coverImage']
POST_WRITABLE_FIELDS = ['title', 'slug', 'content', 'coverImage', 'tags', 'status']
