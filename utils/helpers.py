import re
import time
from pydantic import AnyUrl, TypeAdapter, ValidationError
from db.repository import Repository

_url_adapter = TypeAdapter(AnyUrl)

def slugify(text: str) -> str:
    """Generate a URL-friendly slug from a string.

    Example:

    ```python
    slugify('  Foo Bar! ')  # 'foo-bar'
    ```
    """
    slug = text.lower().strip()
    slug = re.sub(r'[^\w\s-]', '', slug, flags=re.ASCII)
    slug = re.sub(r'[\s_-]+', '-', slug, flags=re.ASCII)
    return slug.strip('-')

def is_slug_unique(repository: Repository, slug: str, exclude_id: str | None = None) -> bool:
    """Check that no document in the repository uses the slug, other than ``exclude_id``.

    This is a read before the write that follows it; two concurrent writers can both pass.
    """
    matches = repository.get({'slug': slug})
    return all(match.id == exclude_id for match in matches) if exclude_id else not matches

def unique_slug(repository: Repository, slug: str) -> str:
    """Return the slug, or the slug suffixed with the current time in milliseconds if it is taken."""
    if is_slug_unique(repository, slug):
        return slug
    return f'{slug}-{int(time.time() * 1000)}'

def validate_required_fields(data: dict, required_fields: list[str]) -> list[str]:
    """Return the required fields that are missing, empty or whitespace-only."""
    missing_fields = []
    for field in required_fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and value.strip() == ''):
            missing_fields.append(field)
    return missing_fields

def is_valid_url(value) -> bool:
    """Whether the value parses as an absolute URL."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        _url_adapter.validate_python(value)
        return True
    except ValidationError:
        return False

def get_json_body(event: dict) -> dict | None:
    """Return the parsed request body if it is a JSON object, None otherwise."""
    body = event.get('body')
    if body is None:
        return {}
    return body if isinstance(body, dict) else None

def pick(data: dict, fields: list[str]) -> dict:
    """Keep only the given fields of a request payload."""
    return {field: data[field] for field in fields if field in data}
