"""Organization contexts and linked sign-in identities of the current user"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from api.dependencies import AuthUser, get_current_user, get_db
from domain.schemas.auth_schemas import (
    ChangePasswordRequest,
    ContextListResponse,
    ContextSwitchRequest,
    ContextSwitchResponse,
    IdentityResponse,
    LinkEmailRequest,
    LinkOAuthRequest,
)
from services.context_service import ContextService
from services.identity_service import IdentityService

router = APIRouter(prefix="/contexts", tags=["Contexts"])
identities_router = APIRouter(prefix="/users/me", tags=["Identities"])
logger = logging.getLogger("offleash.api.contexts")


@router.get("", response_model=ContextListResponse)
def list_contexts(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Memberships of the caller with organization names"""
    return ContextService.list_contexts(db, user.user_id, user.org_id)


@router.post("/switch", response_model=ContextSwitchResponse)
def switch_context(
    data: ContextSwitchRequest,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Issue a token scoped to another organization of the caller"""
    return ContextService.switch(db, user.user_id, data.membership_id)


@router.put("/default", response_model=ContextListResponse)
def set_default_context(
    data: ContextSwitchRequest,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ContextService.set_default(db, user.user_id, data.membership_id, user.org_id)


@identities_router.get("/identities", response_model=List[IdentityResponse])
def list_identities(user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return IdentityService.list_identities(db, user.user_id)


@identities_router.post("/identities/google", response_model=List[IdentityResponse])
def link_google(
    data: LinkOAuthRequest,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return IdentityService.link_google(db, user.user_id, data.id_token)


@identities_router.post("/identities/apple", response_model=List[IdentityResponse])
def link_apple(
    data: LinkOAuthRequest,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return IdentityService.link_apple(db, user.user_id, data.id_token)


@identities_router.post("/identities/email", response_model=List[IdentityResponse])
def link_email(
    data: LinkEmailRequest,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add an email and password sign-in to the account"""
    return IdentityService.link_email(db, user.user_id, data)


@identities_router.delete("/identities/{identity_id}")
def unlink_identity(
    identity_id: UUID,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Remove a sign-in method; the last one cannot be removed"""
    IdentityService.unlink(db, user.user_id, identity_id)
    return {"status": "ok", "deleted": str(identity_id)}


@identities_router.put("/password")
def change_password(
    data: ChangePasswordRequest,
    user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    IdentityService.change_password(db, user.user_id, data)
    return {"status": "ok"}
