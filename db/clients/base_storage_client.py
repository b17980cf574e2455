
class StorageUnavailableError(ConnectionError):
    """Raised when the document store is not configured or cannot be reached."""

class BaseStorageClient:
    """Base class for a client to a document store that can store and retrieve documents.

    Each client instance is bound to one collection. This class is intended to be subclassed
    by specific storage client implementations, such as Amazon DynamoDB or an in-memory list.
    Documents are plain dictionaries identified by their ``id`` field.
    """
    def __init__(self, **config: dict):
        """Initialize the storage client with configuration parameters.

        Args:
            collection (str): The name of the collection the client reads and writes.
        """
        self.config = config
        self.collection = config.get('collection')
        self.connected = False

    def connect(self):
        """Connect to the storage system."""
        raise NotImplementedError("Subclasses should implement this method.")

    def disconnect(self):
        """Disconnect from the storage system."""
        raise NotImplementedError("Subclasses should implement this method.")

    def get(self, filters: dict) -> list[dict]:
        """Get every document whose fields equal all of the given filter values."""
        raise NotImplementedError("Subclasses should implement this method.")

    def put(self, value: dict):
        """Insert or replace a document."""
        raise NotImplementedError("Subclasses should implement this method.")

    def delete(self, keys: dict):
        """Delete the documents matching the given keys."""
        raise NotImplementedError("Subclasses should implement this method.")

    def list(self) -> list[dict]:
        """List every document in the collection."""
        raise NotImplementedError("Subclasses should implement this method.")
