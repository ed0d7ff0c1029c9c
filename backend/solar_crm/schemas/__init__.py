"""
Pydantic schemas for the gateway envelope, leads, users and reports.
"""
from .api import ApiResult
from .lead import (
    Etapa, ETAPAS_CONFIG, Lead, LeadBase, LeadCreate, LeadUpdate,
    LeadStageUpdate, LeadListResponse, StageInfo,
)
from .user import Rol, User, UserLogin, UserCreate, UserUpdate
from .report import KpiSummary, StageBreakdown, CityBreakdown, MonthBucket, PipelineReport

__all__ = [
    "ApiResult",
    "Etapa", "ETAPAS_CONFIG", "Lead", "LeadBase", "LeadCreate", "LeadUpdate",
    "LeadStageUpdate", "LeadListResponse", "StageInfo",
    "Rol", "User", "UserLogin", "UserCreate", "UserUpdate",
    "KpiSummary", "StageBreakdown", "CityBreakdown", "MonthBucket", "PipelineReport",
]
