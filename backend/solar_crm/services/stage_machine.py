"""
Pipeline stages and the moves between them.

Any stage can move to any other: reps reopen negotiations, jump straight to a
lost deal, and so on.
"""
from typing import List

from ..schemas.lead import ETAPAS_CONFIG, Etapa, StageInfo

STAGE_ORDER: List[Etapa] = sorted(Etapa, key=lambda etapa: ETAPAS_CONFIG[etapa]["order"])


def can_transition(current: Etapa, target: Etapa) -> bool:
    return True


def transition_targets(current: Etapa) -> List[Etapa]:
    """Stages a lead can be moved to from the pipeline board."""
    return [etapa for etapa in STAGE_ORDER if etapa != current and can_transition(current, etapa)]


def stage_info(etapa: Etapa) -> StageInfo:
    config = ETAPAS_CONFIG[etapa]
    return StageInfo(value=etapa.value, label=config["label"], color=config["color"], order=config["order"])


def list_stages() -> List[StageInfo]:
    return [stage_info(etapa) for etapa in STAGE_ORDER]
