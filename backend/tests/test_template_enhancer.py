from __future__ import annotations

from itertools import count

from backend.app.models.plugin import (
    DSPConnection,
    DSPGraph,
    DSPNode,
    DSPParameter,
    PluginProject,
    PluginProjectBase,
    PluginSettings,
    UIComponent,
)
from backend.app.services.template_enhancer import enhance_template_project


def _ids():
    counter = count(1)
    return lambda: f"auto-{next(counter)}"


def _connection(source: str, target: str, connection_id: str = "c1") -> DSPConnection:
    return DSPConnection(
        id=connection_id,
        source_node_id=source,
        source_port="out",
        target_node_id=target,
        target_port="in",
    )


def _project(node_count: int, connections: list[DSPConnection] | None = None) -> PluginProjectBase:
    nodes = [
        DSPNode(
            id=f"n{index}",
            inputs=["in"],
            outputs=["out"],
            parameters=[DSPParameter(id=f"n{index}-level", name=f"Level {index}", min=0, max=1, value=0.5)],
        )
        for index in range(node_count)
    ]
    return PluginProjectBase(
        name="Test Plugin",
        author="tester",
        ui_components=[
            UIComponent(id="level-knob", properties={"parameter": "level_1", "min": -1, "max": 2}),
            UIComponent(id="meter", type="display"),
        ],
        dsp_graph=DSPGraph(nodes=nodes, connections=connections or []),
        settings=PluginSettings(width=321),
    )


def test_auto_wires_graph_without_connections() -> None:
    project = _project(3)

    enhanced = enhance_template_project(project, id_factory=_ids())

    connections = enhanced.dsp_graph.connections
    assert len(connections) == 2
    assert [(c.id, c.source_node_id, c.target_node_id) for c in connections] == [
        ("auto-1", "n0", "n1"),
        ("auto-2", "n1", "n2"),
    ]


def test_preserves_single_valid_connection_without_auto_wiring() -> None:
    project = _project(3, [_connection("n0", "n2")])

    enhanced = enhance_template_project(project, id_factory=_ids())

    assert enhanced.dsp_graph.connections == [_connection("n0", "n2")]


def test_drops_blank_connections_then_auto_wires() -> None:
    project = _project(
        3,
        [_connection("", "", "blank"), _connection("  ", "n1", "spaces"), _connection("n0", "\t", "tab")],
    )

    enhanced = enhance_template_project(project, id_factory=_ids())

    assert [c.id for c in enhanced.dsp_graph.connections] == ["auto-1", "auto-2"]


def test_keeps_valid_connections_and_drops_invalid_ones() -> None:
    project = _project(3, [_connection("", "n1", "blank"), _connection("n1", "n2", "keep")])

    enhanced = enhance_template_project(project, id_factory=_ids())

    assert [c.id for c in enhanced.dsp_graph.connections] == ["keep"]


def test_single_node_graph_stays_unwired() -> None:
    enhanced = enhance_template_project(_project(1, [_connection("", "")]), id_factory=_ids())

    assert enhanced.dsp_graph.connections == []


def test_empty_graph_stays_empty() -> None:
    enhanced = enhance_template_project(_project(0))

    assert enhanced.dsp_graph.nodes == []
    assert enhanced.dsp_graph.connections == []


def test_binds_ui_components_against_nodes() -> None:
    enhanced = enhance_template_project(_project(3), id_factory=_ids())

    knob, meter = enhanced.ui_components
    assert knob.parameter_id == "n1-level"
    assert knob.properties == {"parameter": "level_1", "min": 0, "max": 1, "value": 0.5}
    assert meter.parameter_id is None


def test_passes_other_fields_through_and_leaves_input_untouched() -> None:
    project = _project(3, [_connection("", "")])
    snapshot = project.model_dump()

    enhanced = enhance_template_project(project, id_factory=_ids())

    assert project.model_dump() == snapshot
    assert enhanced is not project
    assert enhanced.name == "Test Plugin"
    assert enhanced.author == "tester"
    assert enhanced.settings.width == 321
    assert enhanced.dsp_graph.nodes == project.dsp_graph.nodes


def test_preserves_project_type_and_id() -> None:
    base = _project(2)
    project = PluginProject.model_validate({**base.model_dump(), "id": "project-1"})

    enhanced = enhance_template_project(project, id_factory=_ids())

    assert isinstance(enhanced, PluginProject)
    assert enhanced.id == "project-1"
    assert len(enhanced.dsp_graph.connections) == 1
