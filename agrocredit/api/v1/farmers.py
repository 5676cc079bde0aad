"""Farmer endpoints: bulk upload, agent search and linking, farmer profile"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from agrocredit.api.v1.schemas import AgentFarmersResponse, FarmerImportResponse, FarmerResponse
from agrocredit.api.dependencies import get_request_id, require_admin, require_agent, require_farmer
from agrocredit.infrastructure.database.models import User
from agrocredit.infrastructure.database.session import get_db
from agrocredit.infrastructure.database.repositories import FarmerRepository
from agrocredit.domain.exceptions import (
    DependencyFailure,
    DuplicateRecordError,
    NotFoundError,
    PreconditionViolation,
    ValidationError,
)
from agrocredit.infrastructure.observability.metrics import farmer_link_counter, farmers_imported_counter
from agrocredit.infrastructure.observability.logging import log_farmer_import
from agrocredit.services import farmers as farmer_service

router = APIRouter()


@router.get("/farmers", response_model=List[FarmerResponse])
def list_farmers(
    q: Optional[str] = Query(None, description="Phone, national ID or name fragment"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return [FarmerResponse.from_record(f) for f in FarmerRepository(db).list_farmers(q)]


@router.post("/farmers/import", response_model=FarmerImportResponse, status_code=201)
async def import_farmers(
    request: Request,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """
    Register farmers from a CSV request body.

    Columns: Name, Phone, National ID (header names are case-insensitive;
    national_id, nationalId and ID are all accepted). The upload is one
    batch: a duplicate phone or national ID rejects every row.
    """
    request_id = get_request_id(request)
    body = await request.body()

    try:
        csv_text = body.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=422, detail="CSV must be UTF-8 encoded")

    try:
        farmers = farmer_service.import_farmers(db, csv_text)
    except DuplicateRecordError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DependencyFailure:
        raise HTTPException(status_code=503, detail="Record store unavailable")

    farmers_imported_counter.inc(len(farmers))
    log_farmer_import(request_id, admin.id, len(farmers))
    return FarmerImportResponse(
        imported=len(farmers),
        farmers=[FarmerResponse.from_record(f) for f in farmers],
    )


@router.get("/agent/farmers", response_model=AgentFarmersResponse)
def search_agent_farmers(
    q: Optional[str] = Query(None, description="Phone, national ID or name fragment"),
    db: Session = Depends(get_db),
    agent: User = Depends(require_agent),
):
    """Agent's linked farmers and unlinked farmers available to claim"""
    mine, available = farmer_service.search_for_agent(db, agent, q)
    return AgentFarmersResponse(
        mine=[FarmerResponse.from_record(f) for f in mine],
        available=[FarmerResponse.from_record(f) for f in available],
    )


@router.post("/farmers/{farmer_id}/link", response_model=FarmerResponse)
def link_farmer(
    farmer_id: str,
    db: Session = Depends(get_db),
    agent: User = Depends(require_agent),
):
    try:
        farmer = farmer_service.link_farmer(db, farmer_id, agent)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PreconditionViolation as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DependencyFailure:
        raise HTTPException(status_code=503, detail="Record store unavailable")

    farmer_link_counter.inc()
    return FarmerResponse.from_record(farmer)


@router.get("/farmer/profile", response_model=FarmerResponse)
def get_farmer_profile(db: Session = Depends(get_db), user: User = Depends(require_farmer)):
    try:
        farmer = farmer_service.farmer_for_user(db, user)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return FarmerResponse.from_record(farmer)
