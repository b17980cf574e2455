from dataclasses import dataclass, field
import logging
import os

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = 'your-'

@dataclass
class AppConfig:
    env: str
    port: int
    admin_email: str
    allowed_origins: list[str]
    max_body_bytes: int
    log_level: str

    @property
    def is_development(self) -> bool:
        return self.env == 'development'

@dataclass
class FirebaseConfig:
    project_id: str
    private_key_id: str
    private_key: str
    client_email: str
    client_id: str
    auth_uri: str
    token_uri: str
    auth_provider_x509_cert_url: str
    client_x509_cert_url: str
    web_api_key: str

    @property
    def is_configured(self) -> bool:
        """Whether the service account fields needed by the Admin SDK are filled in with real values."""
        required = [self.project_id, self.private_key, self.client_email]
        return all(value and not value.startswith(PLACEHOLDER_PREFIX) for value in required)

    @property
    def sign_in_api_key(self) -> str | None:
        if not self.web_api_key or self.web_api_key.startswith(PLACEHOLDER_PREFIX):
            return None
        return self.web_api_key

    @property
    def service_account(self) -> dict:
        return {
            'type': 'service_account',
            'project_id': self.project_id,
            'private_key_id': self.private_key_id,
            'private_key': self.private_key,
            'client_email': self.client_email,
            'client_id': self.client_id,
            'auth_uri': self.auth_uri,
            'token_uri': self.token_uri,
            'auth_provider_x509_cert_url': self.auth_provider_x509_cert_url,
            'client_x509_cert_url': self.client_x509_cert_url,
        }

@dataclass
class AwsConfig:
    access_key_id: str
    secret_access_key: str
    region: str

@dataclass
class StorageConfig:
    backend: str
    table_prefix: str
    endpoint_url: str

@dataclass
class DeploymentConfig:
    lambda_function_name: str
    zip_file: str
    deployment_bucket: str

@dataclass
class Config:
    app: AppConfig
    firebase: FirebaseConfig
    aws: AwsConfig
    storage: StorageConfig
    deployment: DeploymentConfig = field(default_factory=lambda: DeploymentConfig('', '', ''))

DEFAULT_ALLOWED_ORIGINS = [
    'http://localhost:3000',
    'http://localhost:3001',
    'http://localhost:5173',
    'http://localhost:8080',
    'http://127.0.0.1:3000',
    'http://127.0.0.1:5173',
]

def _split_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(',') if origin.strip()]

def _load_from_file(target = 'config.ini') -> Config:
    """Load the configuration from an INI file.

    Every setting can be overridden by an environment variable, and falls back to a
    default when neither is present so that the module always imports.
    """
    import configparser
    _config = configparser.ConfigParser()
    _config.read(target)

    def setting(section: str, key: str, env: str, default: str = '') -> str:
        value = os.getenv(env)
        if value is not None:
            return value
        return _config.get(section, key, fallback=default)

    origins = setting('APP', 'ALLOWED_ORIGINS', 'ALLOWED_ORIGINS')

    return Config(
        app=AppConfig(
            env=setting('APP', 'ENV', 'ENV', 'production'),
            port=int(setting('APP', 'PORT', 'PORT', '3000')),
            admin_email=setting('APP', 'ADMIN_EMAIL', 'ADMIN_EMAIL'),
            allowed_origins=_split_origins(origins) if origins else list(DEFAULT_ALLOWED_ORIGINS),
            max_body_bytes=int(setting('APP', 'MAX_BODY_BYTES', 'MAX_BODY_BYTES', str(10 * 1024 * 1024))),
            log_level=setting('APP', 'LOG_LEVEL', 'LOG_LEVEL', 'INFO'),
        ),
        firebase=FirebaseConfig(
            project_id=setting('FIREBASE', 'PROJECT_ID', 'FIREBASE_PROJECT_ID'),
            private_key_id=setting('FIREBASE', 'PRIVATE_KEY_ID', 'FIREBASE_PRIVATE_KEY_ID'),
            # Keys pasted into env files usually carry literal "\n" sequences
            private_key=setting('FIREBASE', 'PRIVATE_KEY', 'FIREBASE_PRIVATE_KEY').replace('\\n', '\n'),
            client_email=setting('FIREBASE', 'CLIENT_EMAIL', 'FIREBASE_CLIENT_EMAIL'),
            client_id=setting('FIREBASE', 'CLIENT_ID', 'FIREBASE_CLIENT_ID'),
            auth_uri=setting('FIREBASE', 'AUTH_URI', 'FIREBASE_AUTH_URI', 'https://accounts.google.com/o/oauth2/auth'),
            token_uri=setting('FIREBASE', 'TOKEN_URI', 'FIREBASE_TOKEN_URI', 'https://oauth2.googleapis.com/token'),
            auth_provider_x509_cert_url=setting('FIREBASE', 'AUTH_PROVIDER_X509_CERT_URL', 'FIREBASE_AUTH_PROVIDER_X509_CERT_URL', 'https://www.googleapis.com/oauth2/v1/certs'),
            client_x509_cert_url=setting('FIREBASE', 'CLIENT_X509_CERT_URL', 'FIREBASE_CLIENT_X509_CERT_URL'),
            web_api_key=setting('FIREBASE', 'WEB_API_KEY', 'FIREBASE_WEB_API_KEY'),
        ),
        aws=AwsConfig(
            access_key_id=setting('AWS', 'ACCESS_KEY_ID', 'AWS_ACCESS_KEY_ID'),
            secret_access_key=setting('AWS', 'SECRET_ACCESS_KEY', 'AWS_SECRET_ACCESS_KEY'),
            region=setting('AWS', 'REGION', 'AWS_REGION', 'ap-southeast-2'),
        ),
        storage=StorageConfig(
            backend=setting('STORAGE', 'BACKEND', 'STORAGE_BACKEND', 'dynamodb').lower(),
            table_prefix=setting('STORAGE', 'TABLE_PREFIX', 'DYNAMODB_TABLE_PREFIX', 'affiliate_'),
            endpoint_url=setting('STORAGE', 'ENDPOINT_URL', 'DYNAMODB_ENDPOINT_URL'),
        ),
        deployment=DeploymentConfig(
            lambda_function_name=setting('DEPLOYMENT', 'LAMBDA_FUNCTION_NAME', 'LAMBDA_FUNCTION_NAME'),
            zip_file=setting('DEPLOYMENT', 'ZIP_FILE', 'DEPLOYMENT_ZIP_FILE', 'deployment.zip'),
            deployment_bucket=setting('DEPLOYMENT', 'DEPLOYMENT_BUCKET', 'DEPLOYMENT_BUCKET'),
        ),
    )

config = _load_from_file(os.getenv('CONFIG_FILE', 'config.ini'))
logger.info("Loaded configuration for environment: %s", config.app.env)
