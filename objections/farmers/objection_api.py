"""
Farmer Objection API

Endpoints:
- GET /objection - List my objections (newest first)
- GET /objection/can-submit - Whether I may file a new objection
- POST /objection - File a new objection

**Access:** farmer tokens only
"""

from typing import List
from fastapi import APIRouter, Depends

from objections.lifecycle import ObjectionLifecycle
from objections.service.auth import require_farmer
from objections.service.dependencies import get_lifecycle
from objections.service.schemas import CanSubmitResponse, ObjectionResponse, SubmitObjectionRequest
from objections.tokens import Claims

router = APIRouter(prefix="/objection", tags=["objections"])


@router.get("", response_model=List[ObjectionResponse])
def list_my_objections(
    claims: Claims = Depends(require_farmer),
    lifecycle: ObjectionLifecycle = Depends(get_lifecycle),
):
    return lifecycle.list_for_farmer(claims.farmer_id)


@router.get("/can-submit", response_model=CanSubmitResponse)
def can_submit(
    claims: Claims = Depends(require_farmer),
    lifecycle: ObjectionLifecycle = Depends(get_lifecycle),
):
    return CanSubmitResponse(canSubmit=lifecycle.can_submit(claims.farmer_id))


@router.post("", response_model=ObjectionResponse, status_code=201)
def submit_objection(
    body: SubmitObjectionRequest,
    claims: Claims = Depends(require_farmer),
    lifecycle: ObjectionLifecycle = Depends(get_lifecycle),
):
    """
    File a new objection.

    **Workflow:**
    1. Reject if I already have a pending or reviewed objection (409)
    2. Allocate an OBJ-#### code
    3. Store with status pending
    """
    return lifecycle.submit(claims.farmer_id, body.transaction_number)
