from typing import Any
from pydantic import BaseModel
from db.clients.base_storage_client import BaseStorageClient
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)

def sort_key(value: Any) -> tuple:
    """Sort key that places missing values before any present value."""
    return (value is not None, value)

class Repository():
    def __init__(self,
                 model: type[BaseModel] = BaseModel,
                 client: BaseStorageClient = None,
                 name: str = None,
                 keys: list[str] = ['id'],
                 auto_generate_key: bool = True,
                 verbose: bool = False,
                 auto_connect: bool = False
                ):
        """Initialize the repository with a model and a storage client.

        Args:
            model (BaseModel): The Pydantic model documents are validated against.
            client (BaseStorageClient): The storage client to use for data operations.
            name (str): The collection name, used when the client is rebuilt.
            keys (list[str]): The list of primary keys to identify items in the storage.
            auto_generate_key (bool): Whether to automatically generate keys if they are not provided.
            verbose (bool): Whether to log every operation for debugging.
        """
        self.client = client
        self.name = name or (client.collection if client else None)
        self._model = model
        self._keys = keys
        self._auto_generate_key = auto_generate_key
        self._verbose = verbose
        if auto_connect:
            self.connect()

    def connect(self) -> None:
        """Connect to the storage client."""
        if self._verbose: logger.debug("[Repository:%s] connect", self.name)
        self.client.connect()

    def disconnect(self) -> None:
        """Disconnect from the storage client."""
        if self._verbose: logger.debug("[Repository:%s] disconnect", self.name)
        self.client.disconnect()

    def _dump(self, item: dict | BaseModel) -> dict:
        """Convert an item to the stored document shape: camelCase keys and JSON-compatible values."""
        if isinstance(item, dict):
            item = self._model.model_validate(item)
        return item.model_dump(mode='json', by_alias=True)

    def _key_values(self, document: dict) -> dict:
        return {key: document.get(key) for key in self._keys}

    def create(self, item: dict | BaseModel) -> BaseModel:
        """Add a new item to the storage, generating its keys if needed."""
        document = dict(item) if isinstance(item, dict) else item.model_dump(by_alias=True)
        for key in self._keys:
            if self._auto_generate_key and not document.get(key):
                document[key] = str(uuid4())
            elif key not in document:
                raise ValueError(f"Item must have a '{key}' key.")
        document = self._dump(document)
        if self._verbose: logger.debug("[Repository:%s] create %s", self.name, document)

        keys = self._key_values(document)
        if self.client.get(keys):
            raise ValueError(f"Item with keys {keys} already exists.")
        self.client.put(document)
        return self._model.model_validate(document)

    def update(self, item: dict | BaseModel) -> BaseModel:
        """Replace an existing item in the storage."""
        document = self._dump(item)
        if self._verbose: logger.debug("[Repository:%s] update %s", self.name, document)
        keys = self._key_values(document)
        if not self.client.get(keys):
            raise ValueError(f"Item with keys {keys} does not exist.")
        self.client.put(document)
        return self._model.model_validate(document)

    def merge(self, keys: dict, changes: dict) -> BaseModel | None:
        """Apply a partial update to an existing item and return the refreshed item.

        Returns None when no item matches the keys. The merged document is validated
        against the model before it is written, so a bad change raises a ValidationError
        and leaves the stored item untouched.
        """
        existing = self.get_first(keys)
        if existing is None:
            return None
        document = existing.model_dump(by_alias=True)
        document.update(changes)
        merged = self._dump(document)
        if self._verbose: logger.debug("[Repository:%s] merge %s", self.name, merged)
        self.client.put(merged)
        return self._model.model_validate(merged)

    def get(self, filters: dict, sort_by: str = None, descending: bool = False, limit: int = None) -> list[BaseModel]:
        """Retrieve every item whose fields equal the given filter values."""
        items = [self._model.model_validate(item) for item in self.client.get(filters)]
        return self._arrange(items, sort_by, descending, limit)

    def get_first(self, filters: dict, default = None) -> BaseModel | None:
        """Retrieve the first item returned by the storage for the given filters."""
        data = self.client.get(filters)
        if not data:
            return default
        return self._model.model_validate(data[0])

    def count(self, filters: dict = None) -> int:
        return len(self.client.get(filters) if filters else self.client.list())

    def delete(self, item: BaseModel | dict) -> None:
        """Delete an item from the storage."""
        if isinstance(item, BaseModel):
            item_keys = self._key_values(item.model_dump(by_alias=True))
        else:
            item_keys = item
        self.client.delete(item_keys)

    def _arrange(self, items: list[BaseModel], sort_by: str | None, descending: bool, limit: int | None) -> list[BaseModel]:
        if sort_by:
            items = sorted(items, key=lambda item: sort_key(getattr(item, sort_by)), reverse=descending)
        if limit is not None:
            items = items[:limit]
        return items

    # Defined after every list[...] annotation: the method shadows the builtin in the class body
    def list(self, sort_by: str = None, descending: bool = False, limit: int = None) -> list[BaseModel]:
        """Retrieve all items from the storage."""
        items = [self._model.model_validate(item) for item in self.client.list()]
        return self._arrange(items, sort_by, descending, limit)

    def create_session(self) -> 'RepositorySession':
        """Create a session for the repository."""
        return RepositorySession(self)

class RepositorySession():
    def __init__(self, repository: 'Repository'):
        """Initialize the repository session."""
        self._repository = repository

    def __enter__(self) -> Repository:
        """Enter the repository session."""
        self._repository.connect()
        return self._repository

    def __exit__(self, exc_type, exc_value, traceback):
        """Exit the repository session."""
        self._repository.disconnect()
