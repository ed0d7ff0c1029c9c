"""
Client-side filters for the leads table and the pipeline board.
"""
from typing import Dict, List, Optional, Sequence

from ..schemas.lead import Etapa, Lead
from .stage_machine import STAGE_ORDER


def filter_leads(
    leads: Sequence[Lead],
    ciudad: Optional[str] = None,
    etapa: Optional[Etapa] = None,
    embajador: Optional[str] = None,
    search: Optional[str] = None
) -> List[Lead]:
    """
    Apply the table filters.

    City, stage and ambassador match exactly; `search` is a case-insensitive
    substring of the lead name. Empty filters are ignored.
    """
    needle = search.lower() if search else None
    result = []
    for lead in leads:
        if ciudad and lead.ubicacion != ciudad:
            continue
        if etapa and lead.etapa != etapa:
            continue
        if embajador and lead.embajador != embajador:
            continue
        if needle and needle not in lead.nombre.lower():
            continue
        result.append(lead)
    return result


def distinct_cities(leads: Sequence[Lead]) -> List[str]:
    return list(dict.fromkeys(lead.ubicacion for lead in leads))


def distinct_ambassadors(leads: Sequence[Lead]) -> List[str]:
    return list(dict.fromkeys(lead.embajador for lead in leads if lead.embajador))


def recent_leads(leads: Sequence[Lead], limit: int = 10) -> List[Lead]:
    """The last rows of the sheet, newest first."""
    return list(reversed(leads))[:limit]


def group_by_stage(leads: Sequence[Lead]) -> Dict[Etapa, List[Lead]]:
    """Pipeline board columns, every stage present."""
    columns: Dict[Etapa, List[Lead]] = {etapa: [] for etapa in STAGE_ORDER}
    for lead in leads:
        columns[lead.etapa].append(lead)
    return columns
