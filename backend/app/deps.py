"""
FastAPI dependencies that hand the per-process adapters to the workflows.

The adapters are built once in the application lifespan and kept on
``app.state``; tests override these functions with fakes via
``app.dependency_overrides``.
"""

from fastapi import Request

from app.config import Settings
from app.services.workflows import RegistrationWorkflow, UploadWorkflow


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upload_workflow(request: Request) -> UploadWorkflow:
    state = request.app.state
    return UploadWorkflow(
        gateway=state.gateway,
        relay=state.relay,
        notifier=state.notifier,
        settings=state.settings,
    )


def get_registration_workflow(request: Request) -> RegistrationWorkflow:
    state = request.app.state
    return RegistrationWorkflow(
        gateway=state.gateway,
        notifier=state.notifier,
        settings=state.settings,
    )
