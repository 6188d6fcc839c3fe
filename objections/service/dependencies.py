"""
FastAPI dependencies resolving the collaborators built by create_app().
"""

from fastapi import HTTPException, Request

from objections.admin.queries import AdminQueryEngine
from objections.config import Settings
from objections.farmers.accounts import FarmerAccounts
from objections.lifecycle import ObjectionLifecycle
from objections.tokens import TokenService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_lifecycle(request: Request) -> ObjectionLifecycle:
    return request.app.state.lifecycle


def get_queries(request: Request) -> AdminQueryEngine:
    return request.app.state.queries


def get_accounts(request: Request) -> FarmerAccounts:
    return request.app.state.accounts


def get_token_service(request: Request) -> TokenService:
    tokens = request.app.state.token_service
    if tokens is None:
        # JWT_SECRET not set, refuse to issue or accept tokens
        raise HTTPException(status_code=500, detail="JWT secret not configured")
    return tokens
