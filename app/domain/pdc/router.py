"""PDC router - FastAPI endpoints for post-dated checks"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.responses import unwrap
from .schemas import (
    AutoIssueResponse,
    PDCCreate,
    PDCItemDetail,
    PDCResponse,
    PDCSearchResponse,
    PDCStats,
    PDCStatusUpdate,
)
from .service import PDCService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pdc", tags=["Post-Dated Checks"])


def get_pdc_service(db: Session = Depends(get_db)) -> PDCService:
    """Dependency injection for PDCService"""
    return PDCService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.post("", response_model=PDCResponse, status_code=201)
async def create_pdc(data: PDCCreate, service: PDCService = Depends(get_pdc_service)):
    """Create a PDC; checks dated today or earlier are issued immediately"""
    return unwrap(service.create_pdc(data))["pdc"]


@router.get("", response_model=list[PDCResponse])
async def get_all_pdcs(service: PDCService = Depends(get_pdc_service)):
    return unwrap(service.get_all_pdcs())["pdcs"]


@router.get("/search", response_model=PDCSearchResponse)
async def search_pdcs(
    checkNumber: Optional[str] = Query(None),
    supplier: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    dateFrom: Optional[date] = Query(None),
    dateTo: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: PDCService = Depends(get_pdc_service),
):
    """Paginated case-insensitive search"""
    result = unwrap(
        service.search_pdcs(checkNumber, supplier, status, dateFrom, dateTo, page, limit)
    )
    return PDCSearchResponse(
        pdcs=result["pdcs"], total=result["total"], page=result["page"], limit=result["limit"]
    )


@router.get("/stats", response_model=PDCStats)
async def get_pdc_stats(service: PDCService = Depends(get_pdc_service)):
    """Counts and amounts per status"""
    return unwrap(service.get_pdc_stats())["stats"]


@router.get("/status/{status}", response_model=list[PDCResponse])
async def get_pdcs_by_status(status: str, service: PDCService = Depends(get_pdc_service)):
    return unwrap(service.get_pdcs_by_status(status))["pdcs"]


@router.get("/supplier/{supplier}", response_model=list[PDCResponse])
async def get_pdcs_by_supplier(supplier: str, service: PDCService = Depends(get_pdc_service)):
    return unwrap(service.get_pdcs_by_supplier(supplier))["pdcs"]


@router.get("/date-range", response_model=list[PDCResponse])
async def get_pdcs_by_date_range(
    startDate: date = Query(...),
    endDate: date = Query(...),
    service: PDCService = Depends(get_pdc_service),
):
    return unwrap(service.get_pdcs_by_date_range(startDate, endDate))["pdcs"]


@router.post("/auto-issue/run", response_model=AutoIssueResponse)
async def run_auto_issue(service: PDCService = Depends(get_pdc_service)):
    """Run the auto-issue sweep now instead of waiting for the scheduler"""
    result = unwrap(service.run_auto_issue())
    return AutoIssueResponse(success=True, issuedCount=result["issuedCount"])


@router.get("/{pdc_id}", response_model=PDCResponse)
async def get_pdc(pdc_id: str, service: PDCService = Depends(get_pdc_service)):
    return unwrap(service.get_pdc(pdc_id))["pdc"]


@router.get("/{pdc_id}/items", response_model=list[PDCItemDetail])
async def get_pdc_items(pdc_id: str, service: PDCService = Depends(get_pdc_service)):
    """Line items merged with their inventory records"""
    return unwrap(service.get_pdc_items(pdc_id))["items"]


@router.patch("/{pdc_id}/status", response_model=PDCResponse)
async def update_pdc_status(
    pdc_id: str,
    update: PDCStatusUpdate,
    service: PDCService = Depends(get_pdc_service),
):
    """Issue or cancel a check manually"""
    return unwrap(service.update_pdc_status(pdc_id, update))["pdc"]


@router.delete("/{pdc_id}")
async def delete_pdc(pdc_id: str, service: PDCService = Depends(get_pdc_service)):
    """Soft delete (cancel) a check"""
    unwrap(service.delete_pdc(pdc_id))
    return {"message": "PDC cancelled"}
