from .document import Document

class Category(Document):
    name: str
    slug: str
    description: str = ''

    def to_response(self, product_count: int | None = None) -> dict:
        """Serialize the category, adding the product count computed by the caller."""
        data = super().to_response()
        if product_count is not None:
            data['productCount'] = product_count
        return data

CATEGORY_REQUIRED_FIELDS = ['name']
CATEGORY_WRITABLE_FIELDS = ['name', 'slug', 'description']
