"""
Leads router: snapshot listing, filters and CRUD through the sheet.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..config import get_settings
from ..dependencies import get_current_user, get_lead_repository, get_session
from ..schemas.lead import Etapa, Lead, LeadCreate, LeadListResponse, LeadStageUpdate, LeadUpdate, StageInfo
from ..schemas.user import User
from ..services.auth_service import SessionContext
from ..services.lead_filters import (
    distinct_ambassadors, distinct_cities, filter_leads, group_by_stage, recent_leads,
)
from ..services.lead_repository import LeadRepository
from ..services.sheets_gateway import SheetsApiError
from ..services.stage_machine import list_stages, stage_info, transition_targets

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/leads", tags=["leads"])


async def ensure_loaded(session: SessionContext, repository: LeadRepository) -> List[Lead]:
    """Load the snapshot on first use; later reads reuse it until a refetch."""
    if not repository.loaded and not repository.loading:
        await repository.refetch(session)
    return repository.leads


def snapshot_response(repository: LeadRepository, leads: List[Lead]) -> LeadListResponse:
    return LeadListResponse(
        total=len(leads),
        loading=repository.loading,
        error=repository.error,
        leads=leads,
    )


def _raise_failure(repository: LeadRepository):
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=repository.last_message or "Error en la hoja de cálculo"
    )


@router.get("/", response_model=LeadListResponse)
async def list_leads(
    ciudad: Optional[str] = None,
    etapa: Optional[Etapa] = None,
    embajador: Optional[str] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """List leads of the current snapshot with the table filters."""
    leads = await ensure_loaded(session, repository)
    filtered = filter_leads(leads, ciudad=ciudad, etapa=etapa, embajador=embajador, search=search)
    return snapshot_response(repository, filtered)


@router.post("/refresh", response_model=LeadListResponse)
async def refresh_leads(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Reload the snapshot from the sheet (the "Retry" button)."""
    await repository.refetch(session)
    return snapshot_response(repository, repository.leads)


# NOTE: These routes MUST come BEFORE /{fila}
@router.get("/stages", response_model=List[StageInfo])
def get_stages():
    """Get every pipeline stage with its label and color."""
    return list_stages()


@router.get("/recent", response_model=List[Lead])
async def get_recent_leads(
    limit: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Newest leads first (dashboard)."""
    leads = await ensure_loaded(session, repository)
    return recent_leads(leads, limit or settings.recent_leads_limit)


@router.get("/filters")
async def get_filter_options(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Values offered by the table filter drop-downs."""
    leads = await ensure_loaded(session, repository)
    return {
        "ciudades": distinct_cities(leads),
        "embajadores": distinct_ambassadors(leads),
        "etapas": [stage.value for stage in list_stages()],
    }


@router.get("/board")
async def get_pipeline_board(
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
) -> List[Dict[str, Any]]:
    """Pipeline columns with the stages each card can move to."""
    leads = await ensure_loaded(session, repository)
    board = []
    for etapa, items in group_by_stage(leads).items():
        board.append({
            "etapa": stage_info(etapa).model_dump(),
            "targets": [target.value for target in transition_targets(etapa)],
            "leads": [lead.model_dump(by_alias=True, mode="json") for lead in items],
        })
    return board


@router.get("/{fila}", response_model=Lead)
async def get_lead(
    fila: int,
    current_user: User = Depends(get_current_user),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Read a single row straight from the sheet."""
    try:
        lead = await repository.read_row(fila)
    except SheetsApiError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    if lead is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead


@router.post("/", response_model=LeadListResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    lead: LeadCreate,
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Append a lead to the sheet and return the refreshed snapshot."""
    if not await repository.create(session, lead):
        _raise_failure(repository)
    return snapshot_response(repository, repository.leads)


@router.patch("/{fila}", response_model=LeadListResponse)
async def update_lead(
    fila: int,
    update: LeadUpdate,
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Update some fields of a lead."""
    if not await repository.update(session, fila, update):
        _raise_failure(repository)
    return snapshot_response(repository, repository.leads)


@router.patch("/{fila}/etapa", response_model=LeadListResponse)
async def update_lead_stage(
    fila: int,
    stage_update: LeadStageUpdate,
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Move a lead to another pipeline stage."""
    if not await repository.update_stage(session, fila, stage_update.etapa):
        _raise_failure(repository)
    return snapshot_response(repository, repository.leads)


@router.delete("/{fila}", response_model=LeadListResponse)
async def delete_lead(
    fila: int,
    current_user: User = Depends(get_current_user),
    session: SessionContext = Depends(get_session),
    repository: LeadRepository = Depends(get_lead_repository)
):
    """Delete a lead row."""
    if not await repository.delete(session, fila):
        _raise_failure(repository)
    return snapshot_response(repository, repository.leads)
