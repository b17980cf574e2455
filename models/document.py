from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
import dateutil.tz

def utc_now() -> datetime:
    return datetime.now(dateutil.tz.tzutc())

class Document(BaseModel):
    """Base for every stored document.

    Fields are snake_case in Python and camelCase on the wire and in the store.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_response(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)
