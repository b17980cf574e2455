from decimal import Decimal
from functools import reduce
import json
import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError, NoCredentialsError, EndpointConnectionError
from db.clients.base_storage_client import BaseStorageClient, StorageUnavailableError
from config import config

UNAVAILABLE_ERROR_CODES = ['ResourceNotFoundException', 'UnrecognizedClientException', 'AccessDeniedException']

def to_dynamo(value: dict) -> dict:
    """DynamoDB rejects floats, so every float is stored as a Decimal."""
    return json.loads(json.dumps(value), parse_float=Decimal)

def from_dynamo(value):
    """Convert the Decimals returned by DynamoDB back to ints and floats."""
    if isinstance(value, list):
        return [from_dynamo(item) for item in value]
    if isinstance(value, dict):
        return {key: from_dynamo(item) for key, item in value.items()}
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value

class DynamoStorageClient(BaseStorageClient):
    """A client for an Amazon DynamoDB table holding one collection, keyed by ``id``."""
    def __init__(self, **config: dict):
        """Initialize the DynamoDB storage client with configuration parameters.

        Args:
            collection (str): The collection name.
            table (str): The DynamoDB table name. Defaults to the collection name.
            region (str): The AWS region of the table.
            endpoint_url (str, optional): A custom endpoint, e.g. DynamoDB Local.
        """
        super().__init__(**config)
        self.table_name = config.get('table') or self.collection
        if not self.table_name:
            raise ValueError("Table name must be provided in the configuration.")
        self.region = config.get('region')
        self.endpoint_url = config.get('endpoint_url') or None
        self.table = None

    def connect(self):
        """Connect to the DynamoDB service. The table resource is reused between sessions."""
        if self.table is not None:
            self.connected = True
            return
        if not self.region:
            raise StorageUnavailableError("AWS region is not configured.")
        session = boto3.Session(
            aws_access_key_id=config.aws.access_key_id or None,
            aws_secret_access_key=config.aws.secret_access_key or None,
            region_name=self.region
        )
        dynamodb = session.resource('dynamodb', endpoint_url=self.endpoint_url)
        self.table = dynamodb.Table(self.table_name)
        self.connected = True

    def disconnect(self):
        self.connected = False

    def _ensure_connected(self):
        if not self.connected:
            raise ConnectionError("Not connected to DynamoDB.")

    def _call(self, operation, **kwargs):
        try:
            return operation(**kwargs)
        except (NoCredentialsError, EndpointConnectionError) as e:
            raise StorageUnavailableError(str(e)) from e
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in UNAVAILABLE_ERROR_CODES:
                raise StorageUnavailableError(str(e)) from e
            raise

    def _scan(self, filters: dict | None = None) -> list[dict]:
        kwargs = {}
        if filters:
            kwargs['FilterExpression'] = reduce(
                lambda expression, condition: expression & condition,
                [Attr(key).eq(to_dynamo({'v': value})['v']) for key, value in filters.items()]
            )
        items = []
        while True:
            result = self._call(self.table.scan, **kwargs)
            items.extend(result.get('Items', []))
            last_key = result.get('LastEvaluatedKey')
            if not last_key:
                return [from_dynamo(item) for item in items]
            kwargs['ExclusiveStartKey'] = last_key

    def get(self, filters: dict) -> list[dict]:
        """Retrieve documents from the table. Lookups by id alone use get_item, anything else scans."""
        self._ensure_connected()
        if list(filters.keys()) == ['id']:
            result = self._call(self.table.get_item, Key={'id': filters['id']})
            item = result.get('Item')
            return [from_dynamo(item)] if item else []
        return self._scan(filters)

    def put(self, value: dict):
        self._ensure_connected()
        if not value.get('id'):
            raise ValueError("Documents must have an 'id' before they are stored.")
        self._call(self.table.put_item, Item=to_dynamo(value))

    def delete(self, keys: dict):
        self._ensure_connected()
        # Protect against empty keys to avoid accidental deletion of all objects
        if not keys:
            raise ValueError("Keys must not be empty. Provide at least one key to delete an object.")
        ids = [keys['id']] if list(keys.keys()) == ['id'] else [item['id'] for item in self._scan(keys)]
        for document_id in ids:
            self._call(self.table.delete_item, Key={'id': document_id})

    def list(self) -> list[dict]:
        self._ensure_connected()
        return self._scan()
