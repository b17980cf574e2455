from typing import Literal
from pydantic import Field
from .document import Document

ADMIN_PERMISSIONS = ['read', 'write', 'delete']

class AdminProfile(Document):
    """Mirror of an identity-provider admin account. The document id is the provider uid."""
    uid: str
    email: str
    display_name: str = 'Admin User'
    role: Literal['admin'] = 'admin'
    permissions: list[str] = Field(default_factory=lambda: list(ADMIN_PERMISSIONS))
    is_active: bool = True
    created_by: str | None = None

    def to_response(self) -> dict:
        data = super().to_response()
        data.pop('id', None)
        data.pop('createdBy', None)
        return data
