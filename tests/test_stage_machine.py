import pytest

from solar_crm.schemas.lead import ETAPAS_CONFIG, Etapa
from solar_crm.services import stage_machine
from solar_crm.services.stage_machine import (
    STAGE_ORDER, can_transition, list_stages, transition_targets,
)


def test_stage_order():
    assert [etapa.value for etapa in STAGE_ORDER] == [
        "contacto", "cotizacion", "negociacion", "cierre_ganado", "cierre_perdido",
    ]


@pytest.mark.parametrize("current", list(Etapa))
@pytest.mark.parametrize("target", list(Etapa))
def test_every_transition_is_allowed(current, target):
    assert can_transition(current, target) is True


def test_negociacion_can_move_anywhere_else():
    targets = transition_targets(Etapa.NEGOCIACION)

    assert targets == [Etapa.CONTACTO, Etapa.COTIZACION, Etapa.CIERRE_GANADO, Etapa.CIERRE_PERDIDO]


def test_board_targets_follow_the_transition_rule(monkeypatch):
    monkeypatch.setattr(stage_machine, "can_transition", lambda current, target: target != Etapa.CIERRE_PERDIDO)

    assert transition_targets(Etapa.CONTACTO) == [Etapa.COTIZACION, Etapa.NEGOCIACION, Etapa.CIERRE_GANADO]


def test_legacy_single_close_stage_is_not_a_stage():
    with pytest.raises(ValueError):
        Etapa("cierre")


def test_list_stages_exposes_labels_and_colors():
    stages = list_stages()

    assert len(stages) == len(ETAPAS_CONFIG) == 5
    assert stages[0].label == "Contacto"
    assert stages[3].label == "Cierre Ganado"
    assert [stage.order for stage in stages] == [1, 2, 3, 4, 5]
