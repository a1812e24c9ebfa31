"""
Storefront Intake API
FastAPI application for customer self-registration and tax-exempt document
uploads against the commerce back-office and the mail platform.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import httpx
from fastapi import FastAPI

from app.config import load_settings
from app.routers import intake
from app.services.binary_relay import BinaryRelay
from app.services.commerce_gateway import CommerceGateway
from app.services.credentials import GraphTokenProvider
from app.services.notifier import MailNotifier

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

# Refuse to start without the required secrets (raises ConfigurationError)
settings = load_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build one authenticated client per external platform for the lifetime of
    the process and close them on shutdown.
    """
    timeout = httpx.Timeout(settings.http_timeout_seconds)
    commerce_client = httpx.AsyncClient(timeout=timeout)
    storage_client = httpx.AsyncClient(timeout=timeout)
    mail_client = httpx.AsyncClient(timeout=timeout)

    app.state.gateway = CommerceGateway(
        endpoint=settings.graphql_endpoint,
        access_token=settings.admin_access_token,
        client=commerce_client,
    )
    app.state.relay = BinaryRelay(storage_client)
    mail_credentials = GraphTokenProvider.from_client_secret(
        tenant_id=settings.azure_tenant_id,
        client_id=settings.azure_client_id,
        client_secret=settings.azure_client_secret,
    )
    app.state.notifier = MailNotifier(
        mailbox=settings.mail_sender_address,
        credentials=mail_credentials,
        client=mail_client,
        graph_base_url=settings.graph_base_url,
    )
    logger.info(
        "Storefront Intake API ready (commerce endpoint: %s, mailbox: %s)",
        settings.graphql_endpoint,
        settings.mail_sender_address,
    )

    yield

    for client in (commerce_client, storage_client, mail_client):
        await client.aclose()
    await mail_credentials.close()
    logger.info("Outbound clients closed")


app = FastAPI(
    title="Storefront Intake API",
    description="Customer self-registration and tax-exempt document uploads",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.settings = settings

app.include_router(intake.router, tags=["intake"])


@app.get("/health")
async def health():
    return {"status": "ok"}
