import copy
from db.clients.base_storage_client import BaseStorageClient

def matches(document: dict, filters: dict) -> bool:
    return all(document.get(key) == value for key, value in filters.items())

class ArrayStorageClient(BaseStorageClient):
    """An in-memory storage client that keeps the documents of one collection in a list.

    Documents are copied on the way in and out so that callers never share state with the store.
    """
    def __init__(self, **config: dict):
        super().__init__(**config)
        self.storage = []

    def connect(self):
        """Connect to the in-memory storage."""
        # No actual connection needed for in-memory storage
        self.connected = True
        return True

    def disconnect(self):
        """Disconnect from the in-memory storage."""
        self.connected = False
        return True

    def get(self, filters: dict) -> list[dict]:
        return [copy.deepcopy(item) for item in self.storage if matches(item, filters)]

    def put(self, value: dict):
        """Store a document, replacing any document with the same id."""
        self.storage = [item for item in self.storage if item.get('id') != value.get('id')]
        self.storage.append(copy.deepcopy(value))

    def delete(self, keys: dict):
        if not keys:
            raise ValueError("Keys must not be empty. Provide at least one key to delete an object.")
        self.storage = [item for item in self.storage if not matches(item, keys)]

    def list(self) -> list[dict]:
        return [copy.deepcopy(item) for item in self.storage]
