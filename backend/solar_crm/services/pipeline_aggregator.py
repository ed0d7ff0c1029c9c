"""
Derived views over a lead snapshot: KPIs, stage distribution, cities and
monthly series.

All functions are pure; they never mutate the leads they receive.
"""
import logging
import re
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from ..schemas.lead import Lead
from ..schemas.report import CityBreakdown, KpiSummary, MonthBucket, PipelineReport, StageBreakdown
from .stage_machine import STAGE_ORDER, stage_info

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")
_SLASH_DATE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{1,4})\b")

# Fallback formats for anything that is neither ISO nor dd/mm/yyyy
GENERIC_DATE_FORMATS = (
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%d %b %Y",
    "%b %d %Y",
    "%B %d, %Y",
    "%a %b %d %Y",
)


def kpi_summary(leads: Sequence[Lead]) -> KpiSummary:
    """Count, totals and average ticket of a snapshot."""
    total_propuestas = sum(lead.valor_propuesta for lead in leads)
    count = len(leads)
    return KpiSummary(
        total_leads=count,
        total_propuestas=total_propuestas,
        total_ahorro=sum(lead.ahorro for lead in leads),
        total_beneficios=sum(lead.beneficios for lead in leads),
        total_paneles=sum(lead.paneles for lead in leads),
        ticket_promedio=total_propuestas / count if count > 0 else 0,
    )


def stage_breakdown(leads: Sequence[Lead]) -> List[StageBreakdown]:
    """One entry per stage, in pipeline order, including empty stages."""
    total = len(leads)
    result = []
    for etapa in STAGE_ORDER:
        items = [lead for lead in leads if lead.etapa == etapa]
        info = stage_info(etapa)
        result.append(StageBreakdown(
            etapa=etapa.value,
            label=info.label,
            color=info.color,
            count=len(items),
            valor=sum(lead.valor_propuesta for lead in items),
            porcentaje=round((len(items) / total * 100) if total > 0 else 0, 1),
        ))
    return result


def city_breakdown(leads: Sequence[Lead]) -> List[CityBreakdown]:
    """Group by the exact city string, in order of first appearance."""
    by_city: Dict[str, Dict[str, int]] = {}
    for lead in leads:
        entry = by_city.setdefault(lead.ubicacion, {"count": 0, "valor": 0})
        entry["count"] += 1
        entry["valor"] += lead.valor_propuesta
    return [
        CityBreakdown(ciudad=city, count=data["count"], valor=data["valor"])
        for city, data in by_city.items()
    ]


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_lead_date(value: Optional[str]) -> Optional[date]:
    """
    Parse the `fecha` cell of a lead.

    Accepts `YYYY-MM-DD[ HH:MM]` (also with a `T` separator), `DD/MM/YYYY`
    (two-digit years are 20xx) and a few generic formats. Returns None when the
    value cannot be parsed.
    """
    if not value:
        return None
    text = str(value).strip()

    match = _ISO_DATE.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    match = _SLASH_DATE.match(text)
    if match:
        day, month, year = (int(part) for part in match.groups())
        if year < 100:
            year += 2000
        return _safe_date(year, month, day)

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in GENERIC_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def month_key(value: Optional[str]) -> Optional[str]:
    """`YYYY-MM` bucket of a date cell, or None if it cannot be parsed."""
    parsed = parse_lead_date(value)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def monthly_series(leads: Sequence[Lead]) -> List[MonthBucket]:
    """Proposed value per calendar month; undated leads are left out."""
    buckets: Dict[str, Dict[str, int]] = {}
    skipped = 0
    for lead in leads:
        key = month_key(lead.fecha)
        if key is None:
            skipped += 1
            continue
        entry = buckets.setdefault(key, {"count": 0, "valor": 0})
        entry["count"] += 1
        entry["valor"] += lead.valor_propuesta

    if skipped:
        logger.debug(f"{skipped} leads without a parseable date left out of the monthly series")

    return [
        MonthBucket(mes=key, count=buckets[key]["count"], valor=buckets[key]["valor"])
        for key in sorted(buckets)
    ]


def build_report(leads: Sequence[Lead]) -> PipelineReport:
    return PipelineReport(
        kpis=kpi_summary(leads),
        etapas=stage_breakdown(leads),
        ciudades=city_breakdown(leads),
        meses=monthly_series(leads),
    )
