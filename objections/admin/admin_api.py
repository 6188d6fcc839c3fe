"""
Admin Objection API

Endpoints:
- POST /objection/admin/login - Exchange admin credentials for a token
- GET /admin/objections - Pending/reviewed objections (page, search)
- GET /admin/archive - Resolved objections with farmer names (page, search)
- POST /admin/resolve-objection - Resolve by body {objection_id}
- POST /admin/objection/{objection_id}/resolve - Resolve by path
- POST /admin/objection/{objection_id}/review - Mark pending objection reviewed

Role checks happen in the core: the token's role is passed through as
actor_role and farmers get 403.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from objections.admin.queries import AdminQueryEngine
from objections.config import Settings
from objections.lifecycle import ObjectionLifecycle
from objections.service.auth import check_admin_credentials, get_claims
from objections.service.dependencies import get_lifecycle, get_queries, get_settings, get_token_service
from objections.service.schemas import (
    AdminLoginRequest,
    ListingResponse,
    ObjectionResponse,
    ResolveObjectionRequest,
    TokenResponse,
    TransitionResponse,
)
from objections.tokens import Claims, TokenService

login_router = APIRouter(prefix="/objection/admin", tags=["admin"])
router = APIRouter(prefix="/admin", tags=["admin"])


@login_router.post("/login", response_model=TokenResponse)
def admin_login(
    body: AdminLoginRequest,
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
):
    check_admin_credentials(settings, body.username, body.password)
    return TokenResponse(token=tokens.issue_for_admin())


@router.get("/objections", response_model=ListingResponse)
def list_active_objections(
    page: Optional[str] = Query(None, description="Page number (defaults to 1)"),
    search: Optional[str] = Query(None, description="Matches code or transaction number"),
    claims: Claims = Depends(get_claims),
    queries: AdminQueryEngine = Depends(get_queries),
):
    return queries.list_active(page, search, actor_role=claims.role).to_dict()


@router.get("/archive", response_model=ListingResponse)
def list_archive(
    page: Optional[str] = Query(None, description="Page number (defaults to 1)"),
    search: Optional[str] = Query(None, description="Matches code, transaction number or farmer name"),
    claims: Claims = Depends(get_claims),
    queries: AdminQueryEngine = Depends(get_queries),
):
    return queries.list_archive(page, search, actor_role=claims.role).to_dict()


@router.post("/resolve-objection", response_model=TransitionResponse)
def resolve_objection_by_body(
    body: ResolveObjectionRequest,
    claims: Claims = Depends(get_claims),
    lifecycle: ObjectionLifecycle = Depends(get_lifecycle),
):
    objection = lifecycle.resolve(body.objection_id, actor_role=claims.role)
    return TransitionResponse(message="Objection resolved", objection=ObjectionResponse.model_validate(objection))


@router.post("/objection/{objection_id}/resolve", response_model=TransitionResponse)
def resolve_objection(
    objection_id: int,
    claims: Claims = Depends(get_claims),
    lifecycle: ObjectionLifecycle = Depends(get_lifecycle),
):
    objection = lifecycle.resolve(objection_id, actor_role=claims.role)
    return TransitionResponse(message="Objection resolved", objection=ObjectionResponse.model_validate(objection))


@router.post("/objection/{objection_id}/review", response_model=TransitionResponse)
def review_objection(
    objection_id: int,
    claims: Claims = Depends(get_claims),
    lifecycle: ObjectionLifecycle = Depends(get_lifecycle),
):
    objection = lifecycle.review(objection_id, actor_role=claims.role)
    return TransitionResponse(message="Objection reviewed", objection=ObjectionResponse.model_validate(objection))
