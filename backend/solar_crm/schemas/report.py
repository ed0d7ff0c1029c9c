"""
Report schemas for the dashboard and reports views.
"""
from typing import List
from pydantic import BaseModel


class KpiSummary(BaseModel):
    """Headline figures over a lead snapshot."""
    total_leads: int = 0
    total_propuestas: int = 0
    total_ahorro: float = 0
    total_beneficios: float = 0
    total_paneles: int = 0
    ticket_promedio: float = 0


class StageBreakdown(BaseModel):
    """Count and proposed value of the leads in one stage."""
    etapa: str
    label: str
    color: str
    count: int
    valor: int
    porcentaje: float


class CityBreakdown(BaseModel):
    """Count and proposed value of the leads in one city."""
    ciudad: str
    count: int
    valor: int


class MonthBucket(BaseModel):
    """Proposed value of the leads dated within one calendar month."""
    mes: str
    count: int
    valor: int


class PipelineReport(BaseModel):
    """Every derived view, computed from the same snapshot."""
    kpis: KpiSummary
    etapas: List[StageBreakdown]
    ciudades: List[CityBreakdown]
    meses: List[MonthBucket]
