"""
Google Calendar connection endpoints.

Login needs a browser on the machine running the server (OAuth
installed-app flow); logout drops and revokes the stored token.
"""

from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import get_dashboard_service
from backend.schemas import StatusResponse
from newtab.core.errors import CredentialStoreError
from newtab.core.models import Authenticated
from newtab.dashboard.service import DashboardService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/status", response_model=StatusResponse)
async def auth_status(service: DashboardService = Depends(get_dashboard_service)):
    """Whether a usable calendar credential exists."""
    state = await service.auth_state()
    return StatusResponse(status="connected" if isinstance(state, Authenticated) else "not_connected")


@router.post("/login", response_model=StatusResponse)
async def login(service: DashboardService = Depends(get_dashboard_service)):
    """Connect Google Calendar, running the consent flow if needed."""
    try:
        state = await service.login()
    except CredentialStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not isinstance(state, Authenticated):
        raise HTTPException(status_code=401, detail="Google authentication failed")
    return StatusResponse(status="connected")


@router.post("/logout", response_model=StatusResponse)
async def logout(service: DashboardService = Depends(get_dashboard_service)):
    """Disconnect Google Calendar."""
    try:
        await service.logout()
    except CredentialStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return StatusResponse(status="not_connected")
