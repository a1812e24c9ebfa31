"""
Process configuration.

Secrets come from the environment (a local .env file is honoured). The four
credentials below are required; the service refuses to start without them.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from app.errors import ConfigurationError

load_dotenv()

REQUIRED_VARIABLES = (
    "AZURE_APP_TENANT_ID",
    "AZURE_APP_CLIENT_ID",
    "AZURE_APP_CLIENT_SECRET_VALUE",
    "ADMIN_ACCESS_TOKEN",
)

DEFAULT_STORE_DOMAIN = "example-store.myshopify.com"
DEFAULT_API_VERSION = "2023-04"
DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class Settings:
    azure_tenant_id: str
    azure_client_id: str
    azure_client_secret: str
    admin_access_token: str
    store_domain: str = DEFAULT_STORE_DOMAIN
    api_version: str = DEFAULT_API_VERSION
    success_redirect_url: Optional[str] = None
    mail_sender_address: str = "notifications@example.com"
    staff_notification_address: str = "staff@example.com"
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS

    @property
    def graphql_endpoint(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}/graphql.json"

    @property
    def admin_base_url(self) -> str:
        return f"https://{self.store_domain}/admin"

    @property
    def redirect_url(self) -> str:
        return self.success_redirect_url or f"https://{self.store_domain}/account"


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ConfigurationError: if any required variable is missing or blank.
    """
    missing = [name for name in REQUIRED_VARIABLES if not os.getenv(name, "").strip()]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    try:
        timeout = float(os.getenv("HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS))
    except ValueError:
        raise ConfigurationError("HTTP_TIMEOUT_SECONDS must be a number")

    return Settings(
        azure_tenant_id=os.environ["AZURE_APP_TENANT_ID"],
        azure_client_id=os.environ["AZURE_APP_CLIENT_ID"],
        azure_client_secret=os.environ["AZURE_APP_CLIENT_SECRET_VALUE"],
        admin_access_token=os.environ["ADMIN_ACCESS_TOKEN"],
        store_domain=os.getenv("SHOPIFY_STORE_DOMAIN", DEFAULT_STORE_DOMAIN),
        api_version=os.getenv("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
        success_redirect_url=os.getenv("SUCCESS_REDIRECT_URL") or None,
        mail_sender_address=os.getenv("MAIL_SENDER_ADDRESS", "notifications@example.com"),
        staff_notification_address=os.getenv("STAFF_NOTIFICATION_ADDRESS", "staff@example.com"),
        graph_base_url=os.getenv("GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL).rstrip("/"),
        http_timeout_seconds=timeout,
    )
