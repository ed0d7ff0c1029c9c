"""
Analytics router for dashboard and reports data.

Every figure is computed from the current lead snapshot, which is already
scoped to the logged-in actor.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends

from ..dependencies import get_current_user, get_lead_repository, get_session
from ..schemas.report import CityBreakdown, KpiSummary, MonthBucket, PipelineReport, StageBreakdown
from ..schemas.user import User
from ..services import pipeline_aggregator
from ..services.auth_service import SessionContext
from ..services.lead_repository import LeadRepository
from .leads import ensure_loaded

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/kpis", response_model=KpiSummary)
async def get_kpis(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Totals and average ticket."""
    leads = await ensure_loaded(session, repository)
    return pipeline_aggregator.kpi_summary(leads)


@router.get("/pipeline", response_model=List[StageBreakdown])
async def get_pipeline_stats(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Count, value and share of leads per stage."""
    leads = await ensure_loaded(session, repository)
    return pipeline_aggregator.stage_breakdown(leads)


@router.get("/cities", response_model=List[CityBreakdown])
async def get_city_stats(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Opportunities per city."""
    leads = await ensure_loaded(session, repository)
    return pipeline_aggregator.city_breakdown(leads)


@router.get("/monthly", response_model=List[MonthBucket])
async def get_monthly_series(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Proposed value per month, oldest first."""
    leads = await ensure_loaded(session, repository)
    return pipeline_aggregator.monthly_series(leads)


@router.get("/report", response_model=PipelineReport)
async def get_report(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """All report sections from one snapshot."""
    leads = await ensure_loaded(session, repository)
    return pipeline_aggregator.build_report(leads)
