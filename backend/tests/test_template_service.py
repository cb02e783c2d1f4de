from __future__ import annotations

from itertools import count

import pytest
from fastapi import HTTPException

from backend.app.models.template import TemplateCategory
from backend.app.services.graph_service import get_processing_order, is_valid_connection
from backend.app.services.parameter_binding import DEFAULT_PARAMETER_ALIASES
from backend.app.services.template_service import TemplateService


def _service(**kwargs) -> TemplateService:
    counter = count(1)
    return TemplateService(id_factory=lambda: f"wire-{next(counter)}", **kwargs)


def test_catalogue_covers_every_category() -> None:
    service = _service()

    templates = service.list_templates()

    assert len(templates) >= 7
    assert {template.category for template in templates} == set(TemplateCategory)
    assert service.categories() == ["synth", "effect", "utility", "dynamics", "modulation"]


def test_list_templates_filters_by_category() -> None:
    service = _service()

    effects = service.list_templates(TemplateCategory.EFFECT)

    assert [template.id for template in effects] == ["template-delay", "template-eq", "template-reverb"]


def test_search_templates_matches_name_description_and_tags() -> None:
    service = _service()

    assert [t.id for t in service.search_templates("SYNTH")] == ["template-synth-basic"]
    assert [t.id for t in service.search_templates("mastering")] == ["template-compressor"]
    assert [t.id for t in service.search_templates("tremolo")] == ["template-lfo-modulator"]
    assert service.search_templates("granular") == []


def test_get_template_raises_404_for_unknown_id() -> None:
    service = _service()

    with pytest.raises(HTTPException) as error:
        service.get_template("template-missing")

    assert error.value.status_code == 404


def test_create_project_auto_wires_placeholder_graph() -> None:
    service = _service()

    project = service.create_project_from_template("template-synth-basic")

    connections = project.dsp_graph.connections
    assert [(c.source_node_id, c.target_node_id) for c in connections] == [
        ("synth-osc", "synth-filter"),
        ("synth-filter", "synth-env"),
        ("synth-env", "synth-amp"),
    ]
    assert [c.id for c in connections] == ["wire-1", "wire-2", "wire-3"]
    assert connections[0].source_port == "out"
    assert connections[0].target_port == "in"


def test_create_project_binds_synth_controls() -> None:
    project = _service().create_project_from_template("template-synth-basic")

    bindings = {component.id: component.parameter_id for component in project.ui_components}
    assert bindings == {
        "synth-cutoff": "filter-cutoff",
        "synth-resonance": "filter-resonance",
        "synth-attack": "env-attack",
        "synth-decay": "env-decay",
        "synth-sustain": "env-sustain",
        "synth-release": "env-release",
        "synth-scope": None,
    }


def test_create_project_keeps_explicit_wiring() -> None:
    service = _service()
    template = service.get_template("template-delay")

    project = service.create_project_from_template("template-delay")

    assert project.dsp_graph.connections == template.project.dsp_graph.connections
    order = get_processing_order(project.dsp_graph.nodes, project.dsp_graph.connections)
    assert [node.id for node in order] == [
        "delay-input",
        "delay-left",
        "delay-right",
        "delay-mixer",
        "delay-output",
    ]


def test_create_project_overrides_with_falsy_parameter_value() -> None:
    project = _service().create_project_from_template("template-delay")

    toggle = next(component for component in project.ui_components if component.id == "delay-ping-pong")
    assert toggle.parameter_id == "delay-ping-pong-param"
    assert toggle.properties["value"] is False


def test_create_project_leaves_unmatched_display_unbound() -> None:
    project = _service().create_project_from_template("template-compressor")

    display = next(component for component in project.ui_components if component.id == "comp-gr")
    assert display.parameter_id is None
    assert len(project.dsp_graph.connections) == 3


def test_create_project_preserves_single_partial_connection() -> None:
    project = _service().create_project_from_template("template-analyzer")

    assert [c.id for c in project.dsp_graph.connections] == ["analyzer-wire-1"]


@pytest.mark.parametrize(
    "template_id",
    [
        "template-synth-basic",
        "template-compressor",
        "template-delay",
        "template-eq",
        "template-reverb",
        "template-analyzer",
        "template-lfo-modulator",
    ],
)
def test_every_template_enhances_to_valid_wiring(template_id: str) -> None:
    project = _service().create_project_from_template(template_id)

    assert project.dsp_graph.connections
    assert all(is_valid_connection(connection) for connection in project.dsp_graph.connections)
    node_ids = {node.id for node in project.dsp_graph.nodes}
    for connection in project.dsp_graph.connections:
        assert connection.source_node_id in node_ids
        assert connection.target_node_id in node_ids


def test_created_projects_are_independent_copies() -> None:
    service = _service()

    first = service.create_project_from_template("template-eq")
    second = service.create_project_from_template("template-eq")

    assert first.id != second.id
    first.ui_components[0].properties["value"] = 999
    assert second.ui_components[0].properties["value"] != 999
    assert service.get_template("template-eq").project.ui_components[0].properties["value"] == 100


def test_template_catalogue_is_not_modified_by_enhancement() -> None:
    service = _service()
    template = service.get_template("template-eq")
    snapshot = template.model_dump()

    service.create_project_from_template("template-eq")

    assert template.model_dump() == snapshot
    assert template.project.dsp_graph.connections[0].source_node_id.strip() == ""


def test_aliases_change_synth_cutoff_binding() -> None:
    project = _service(aliases=DEFAULT_PARAMETER_ALIASES).create_project_from_template("template-synth-basic")

    cutoff = next(component for component in project.ui_components if component.id == "synth-cutoff")
    assert cutoff.parameter_id == "osc-frequency"
    assert cutoff.properties["value"] == 440
