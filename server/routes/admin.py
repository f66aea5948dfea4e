"""Admin login and token validation."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from models import AdminAuthRequest, AdminAuthResponse, AdminTokenRequest
from server.services.auth_service import (
    AdminNotConfiguredError,
    check_admin_password,
    create_admin_token,
    is_valid_admin_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _unauthorized(message: str) -> JSONResponse:
    body = AdminAuthResponse(success=False, message=message)
    return JSONResponse(body.model_dump(), status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/authenticate", response_model=AdminAuthResponse)
async def authenticate(request: AdminAuthRequest):
    try:
        ok = check_admin_password(request.password)
    except AdminNotConfiguredError as e:
        logger.error(str(e))
        return JSONResponse({"detail": str(e)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if not ok:
        logger.warning("Failed admin login attempt")
        return _unauthorized("Invalid password")

    logger.info("Admin authenticated")
    return AdminAuthResponse(success=True, token=create_admin_token(), message="Authentication successful")


@router.post("/validate", response_model=AdminAuthResponse)
async def validate(request: AdminTokenRequest):
    if is_valid_admin_token(request.token):
        return AdminAuthResponse(success=True, message="Token is valid")
    return _unauthorized("Invalid or expired token")
