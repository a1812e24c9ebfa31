"""
Intake router.

Endpoints:
  POST /upload    : tax-exempt document upload (multipart form)
  POST /register  : customer self-registration (url-encoded form or JSON)

Both are posted to directly by storefront forms, so success is a redirect
back to the storefront rather than a JSON body.

Failure visibility differs on purpose:
  /upload    validation failure -> HTML alert page; remote failure -> 500
  /register  back-office failures are logged only; always redirects
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from pydantic import ValidationError as PydanticValidationError

from app.config import Settings
from app.deps import get_registration_workflow, get_settings, get_upload_workflow
from app.errors import ValidationError, WorkflowFailed
from app.models.intake import RegistrationRequest, UploadedFile, UploadRequest
from app.services.workflows import RegistrationWorkflow, UploadWorkflow

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FEEDBACK_COOKIE = "uploadMessage"
UPLOAD_FEEDBACK_MESSAGE = "Your file was uploaded successfully!"
UPLOAD_FEEDBACK_MAX_AGE = 3  # seconds

_MAX_FILE_SIZE_BYTES = 20 * 1024 * 1024  # 20 MB
_FILE_TOO_LARGE_MESSAGE = "File exceeds 20 MB limit. Please submit a smaller file."


def _alert_page(message: str, redirect_url: str) -> HTMLResponse:
    """Client-side alert followed by a redirect, for plain HTML form posts."""
    return HTMLResponse(
        f"<script>alert({json.dumps(message)}); "
        f"window.location.href = {json.dumps(redirect_url)};</script>"
    )


def _server_error() -> PlainTextResponse:
    return PlainTextResponse("Internal Server Error", status_code=500)


async def _read_registration_payload(request: Request) -> dict:
    """Accept either a JSON object or a url-encoded / multipart form."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Malformed JSON body")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Expected a JSON object")
        return payload

    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/upload")
async def upload_tax_exempt_form(
    background_tasks: BackgroundTasks,
    customer_id: str = Form(..., alias="customerId"),
    customer_company: str = Form(..., alias="customerCompany"),
    tax_exempt_form: UploadFile = File(...),
    workflow: UploadWorkflow = Depends(get_upload_workflow),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a tax-exempt form and link it to the customer.

    The staff notification is sent after the response; its failure never
    reaches the customer.
    """
    upload = UploadRequest(
        customer_id=customer_id,
        customer_company=customer_company,
        file=UploadedFile(
            name=tax_exempt_form.filename or "",
            content=await tax_exempt_form.read(),
        ),
    )
    if upload.file.size > _MAX_FILE_SIZE_BYTES:
        return _alert_page(_FILE_TOO_LARGE_MESSAGE, settings.redirect_url)

    try:
        outcome = await workflow.run(upload)
    except ValidationError as e:
        return _alert_page(e.message, settings.redirect_url)
    except WorkflowFailed as e:
        logger.error(
            "Tax exempt upload for customer %s halted at %s; already completed: %s",
            customer_id,
            e.stage,
            e.completed,
        )
        return _server_error()

    background_tasks.add_task(workflow.notify, outcome)

    response = RedirectResponse(settings.redirect_url, status_code=303)
    response.set_cookie(
        UPLOAD_FEEDBACK_COOKIE,
        UPLOAD_FEEDBACK_MESSAGE,
        max_age=UPLOAD_FEEDBACK_MAX_AGE,
    )
    return response


@router.post("/register")
async def register_customer(
    request: Request,
    background_tasks: BackgroundTasks,
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
    settings: Settings = Depends(get_settings),
):
    """
    Register a storefront customer.

    Always redirects to the storefront: back-office failures are logged, not
    shown to the customer.
    """
    payload = await _read_registration_payload(request)
    try:
        registration = RegistrationRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False),
        )

    outcome = await workflow.run(registration)
    background_tasks.add_task(workflow.notify, outcome)

    return RedirectResponse(settings.redirect_url, status_code=303)
