from __future__ import annotations

from typing import Mapping, Sequence
from uuid import uuid4

from fastapi import HTTPException

from backend.app.models.plugin import (
    CodeFiles,
    DSPConnection,
    DSPGraph,
    DSPNode,
    DSPParameter,
    ParameterType,
    ParameterValue,
    PluginProject,
    PluginProjectBase,
    PluginSettings,
    UIComponent,
)
from backend.app.models.template import PluginTemplate, TemplateCategory, TemplateListItem
from backend.app.services.graph_service import IdFactory, new_connection_id
from backend.app.services.template_enhancer import enhance_template_project

CATEGORY_ORDER: tuple[TemplateCategory, ...] = (
    TemplateCategory.SYNTH,
    TemplateCategory.EFFECT,
    TemplateCategory.UTILITY,
    TemplateCategory.DYNAMICS,
    TemplateCategory.MODULATION,
)

# Template graphs that still need wiring carry this placeholder edge.
PLACEHOLDER_CONNECTION = DSPConnection(
    id="placeholder",
    source_node_id="",
    source_port="output",
    target_node_id="",
    target_port="input",
)


class TemplateService:
    def __init__(
        self,
        aliases: Mapping[str, Sequence[str]] | None = None,
        id_factory: IdFactory = new_connection_id,
    ) -> None:
        self._aliases = aliases
        self._id_factory = id_factory
        self._templates = {template.id: template for template in self._load_builtin_templates()}

    def list_templates(self, category: TemplateCategory | None = None) -> list[TemplateListItem]:
        templates = list(self._templates.values())
        if category:
            templates = [template for template in templates if template.category == category]
        return [self._list_item(template) for template in templates]

    def categories(self) -> list[TemplateCategory]:
        return list(CATEGORY_ORDER)

    def search_templates(self, query: str) -> list[TemplateListItem]:
        needle = query.lower()
        return [
            self._list_item(template)
            for template in self._templates.values()
            if needle in template.name.lower()
            or needle in template.description.lower()
            or any(needle in tag.lower() for tag in template.tags)
        ]

    def get_template(self, template_id: str) -> PluginTemplate:
        template = self._templates.get(template_id)
        if not template:
            raise HTTPException(status_code=404, detail=f"Template '{template_id}' not found")
        return template

    def create_project_from_template(self, template_id: str) -> PluginProject:
        template = self.get_template(template_id)
        project = PluginProject.model_validate({**template.project.model_dump(), "id": str(uuid4())})
        return self.enhance_project(project)

    def enhance_project(self, project: PluginProject) -> PluginProject:
        return enhance_template_project(project, id_factory=self._id_factory, aliases=self._aliases)

    @staticmethod
    def _list_item(template: PluginTemplate) -> TemplateListItem:
        return TemplateListItem(
            id=template.id,
            name=template.name,
            category=template.category,
            description=template.description,
            tags=list(template.tags),
        )

    @staticmethod
    def _param(
        param_id: str,
        name: str,
        *,
        min: float | None = None,
        max: float | None = None,
        value: ParameterValue | None = None,
        unit: str | None = None,
        type: ParameterType = ParameterType.FLOAT,
        options: list[str] | None = None,
    ) -> DSPParameter:
        return DSPParameter(
            id=param_id,
            name=name,
            type=type,
            min=min,
            max=max,
            default=value,
            value=value,
            unit=unit,
            options=options,
        )

    @staticmethod
    def _node(
        node_id: str,
        node_type: str,
        label: str,
        column: int,
        *,
        parameters: list[DSPParameter] | None = None,
        inputs: list[str] | None = None,
        outputs: list[str] | None = None,
    ) -> DSPNode:
        return DSPNode(
            id=node_id,
            type=node_type,
            label=label,
            x=100 + column * 200,
            y=100,
            parameters=parameters or [],
            inputs=inputs if inputs is not None else ["in"],
            outputs=outputs if outputs is not None else ["out"],
        )

    @staticmethod
    def _control(
        component_id: str,
        label: str,
        column: int,
        parameter: str | None = None,
        *,
        component_type: str = "knob",
        row: int = 0,
        **properties: ParameterValue,
    ) -> UIComponent:
        props: dict[str, ParameterValue] = dict(properties)
        if parameter is not None:
            props["parameter"] = parameter
        return UIComponent(
            id=component_id,
            type=component_type,
            label=label,
            x=50 + column * 100,
            y=50 + row * 150,
            width=80 if component_type != "waveform" else 300,
            height=100 if component_type != "waveform" else 150,
            properties=props,
        )

    @staticmethod
    def _wire(
        connection_id: str,
        source: str,
        target: str,
        *,
        source_port: str = "out",
        target_port: str = "in",
    ) -> DSPConnection:
        return DSPConnection(
            id=connection_id,
            source_node_id=source,
            source_port=source_port,
            target_node_id=target,
            target_port=target_port,
        )

    def _load_builtin_templates(self) -> list[PluginTemplate]:
        param = self._param
        node = self._node
        control = self._control
        wire = self._wire

        return [
            PluginTemplate(
                id="template-synth-basic",
                name="Basic Synthesizer",
                category=TemplateCategory.SYNTH,
                description="Simple subtractive synthesizer with oscillator, filter, and envelope",
                tags=["synth", "subtractive", "beginner"],
                project=PluginProjectBase(
                    name="Basic Synth",
                    description="A basic subtractive synthesizer",
                    ui_components=[
                        control("synth-cutoff", "Cutoff", 0, "filter_cutoff", min=20, max=20_000, value=1_000),
                        control("synth-resonance", "Resonance", 1, "filter_resonance", min=0, max=1, value=0.5),
                        control("synth-attack", "Attack", 2, "env_attack", min=0.001, max=2, value=0.01),
                        control("synth-decay", "Decay", 3, "env_decay", min=0.001, max=2, value=0.3),
                        control("synth-sustain", "Sustain", 4, "env_sustain", min=0, max=1, value=0.7),
                        control("synth-release", "Release", 5, "env_release", min=0.001, max=5, value=0.5),
                        control("synth-scope", "Output", 0, component_type="waveform", row=1),
                    ],
                    dsp_graph=DSPGraph(
                        nodes=[
                            node(
                                "synth-osc",
                                "oscillator",
                                "OSC",
                                0,
                                inputs=[],
                                parameters=[
                                    param(
                                        "osc-waveform",
                                        "Waveform",
                                        type=ParameterType.ENUM,
                                        value="sawtooth",
                                        options=["sine", "square", "sawtooth", "triangle"],
                                    ),
                                    param("osc-frequency", "Frequency", min=20, max=20_000, value=440, unit="Hz"),
                                    param("osc-detune", "Detune", min=-100, max=100, value=0, unit="cents"),
                                ],
                            ),
                            node(
                                "synth-filter",
                                "filter",
                                "Filter",
                                1,
                                parameters=[
                                    param("filter-cutoff", "Cutoff", min=20, max=20_000, value=1_000, unit="Hz"),
                                    param("filter-resonance", "Resonance", min=0, max=1, value=0.5),
                                ],
                            ),
                            node(
                                "synth-env",
                                "envelope",
                                "Envelope",
                                2,
                                parameters=[
                                    param("env-attack", "Attack", min=0.001, max=2, value=0.01, unit="s"),
                                    param("env-decay", "Decay", min=0.001, max=2, value=0.3, unit="s"),
                                    param("env-sustain", "Sustain", min=0, max=1, value=0.7),
                                    param("env-release", "Release", min=0.001, max=5, value=0.5, unit="s"),
                                ],
                            ),
                            node(
                                "synth-amp",
                                "gain",
                                "Output",
                                3,
                                parameters=[param("amp-gain", "Gain", min=0, max=1, value=0.5)],
                            ),
                        ],
                        connections=[PLACEHOLDER_CONNECTION],
                    ),
                    code=CodeFiles(dsp="// Synth DSP code\n"),
                    settings=PluginSettings(width=700, height=400),
                ),
            ),
            PluginTemplate(
                id="template-compressor",
                name="Dynamic Compressor",
                category=TemplateCategory.DYNAMICS,
                description="Classic dynamics compressor with threshold, ratio, attack, and release controls",
                tags=["compressor", "dynamics", "mastering"],
                project=PluginProjectBase(
                    name="Compressor",
                    description="A dynamic range compressor",
                    ui_components=[
                        control("comp-threshold", "Threshold", 0, "threshold", min=-60, max=0, value=-20),
                        control("comp-ratio", "Ratio", 1, "ratio", min=1, max=20, value=4),
                        control("comp-attack", "Attack", 2, "attack", min=0.1, max=100, value=10),
                        control("comp-release", "Release", 3, "release", min=10, max=1_000, value=100),
                        control("comp-makeup", "Makeup", 4, "makeup_gain", min=0, max=24, value=0),
                        control("comp-gr", "GR", 5, "gain_reduction", component_type="display"),
                    ],
                    dsp_graph=DSPGraph(
                        nodes=[
                            node("comp-input", "input", "Input", 0, inputs=[]),
                            node(
                                "comp-core",
                                "compressor",
                                "Compressor",
                                1,
                                parameters=[
                                    param("comp-threshold-param", "Threshold", min=-60, max=0, value=-20, unit="dB"),
                                    param("comp-ratio-param", "Ratio", min=1, max=20, value=4),
                                    param("comp-attack-param", "Attack", min=0.1, max=100, value=10, unit="ms"),
                                    param("comp-release-param", "Release", min=10, max=1_000, value=100, unit="ms"),
                                    param("comp-knee-param", "Knee", min=0, max=12, value=6, unit="dB"),
                                ],
                            ),
                            node(
                                "comp-makeup-gain",
                                "gain",
                                "Makeup",
                                2,
                                parameters=[
                                    param("comp-makeup-param", "Makeup Gain", min=0, max=24, value=0, unit="dB"),
                                ],
                            ),
                            node("comp-output", "output", "Output", 3, outputs=[]),
                        ],
                        connections=[],
                    ),
                    code=CodeFiles(dsp="// Compressor DSP code\n"),
                    settings=PluginSettings(width=650, height=250),
                ),
            ),
            PluginTemplate(
                id="template-delay",
                name="Stereo Delay",
                category=TemplateCategory.EFFECT,
                description="Stereo delay with feedback, filter, and modulation",
                tags=["delay", "echo", "time-based"],
                project=PluginProjectBase(
                    name="Stereo Delay",
                    description="A stereo delay effect",
                    ui_components=[
                        control("delay-time-left", "Time L", 0, "time_left", min=1, max=2_000, value=250),
                        control("delay-time-right", "Time R", 1, "time_right", min=1, max=2_000, value=375),
                        control("delay-feedback", "Feedback", 2, "feedback", min=0, max=0.95, value=0.5),
                        control("delay-mix", "Mix", 3, "mix", min=0, max=1, value=0.3),
                        control("delay-ping-pong", "Ping-Pong", 4, "ping_pong", component_type="toggle", value=True),
                    ],
                    dsp_graph=DSPGraph(
                        nodes=[
                            node("delay-input", "input", "Input", 0, inputs=[]),
                            node(
                                "delay-left",
                                "delay",
                                "Delay L",
                                1,
                                parameters=[
                                    param("delay-left-time", "Time Left", min=1, max=2_000, value=250, unit="ms"),
                                    param("delay-left-feedback", "Feedback", min=0, max=0.95, value=0.5),
                                ],
                            ),
                            node(
                                "delay-right",
                                "delay",
                                "Delay R",
                                2,
                                parameters=[
                                    param("delay-right-time", "Time Right", min=1, max=2_000, value=375, unit="ms"),
                                    param("delay-right-feedback", "Feedback", min=0, max=0.95, value=0.5),
                                ],
                            ),
                            node(
                                "delay-mixer",
                                "mixer",
                                "Mix",
                                3,
                                inputs=["dry", "wet_left", "wet_right"],
                                parameters=[
                                    param("delay-mix-param", "Mix", min=0, max=1, value=0.3),
                                    param("delay-ping-pong-param", "Ping Pong", type=ParameterType.BOOL, value=False),
                                ],
                            ),
                            node("delay-output", "output", "Output", 4, outputs=[]),
                        ],
                        connections=[
                            wire("delay-wire-1", "delay-input", "delay-left"),
                            wire("delay-wire-2", "delay-input", "delay-right"),
                            wire("delay-wire-3", "delay-input", "delay-mixer", target_port="dry"),
                            wire("delay-wire-4", "delay-left", "delay-mixer", target_port="wet_left"),
                            wire("delay-wire-5", "delay-right", "delay-mixer", target_port="wet_right"),
                            wire("delay-wire-6", "delay-mixer", "delay-output"),
                        ],
                    ),
                    code=CodeFiles(dsp="// Stereo delay DSP code\n"),
                    settings=PluginSettings(width=550, height=250),
                ),
            ),
            PluginTemplate(
                id="template-eq",
                name="3-Band EQ",
                category=TemplateCategory.EFFECT,
                description="Three-band parametric equalizer with low, mid, and high controls",
                tags=["eq", "equalizer", "filter"],
                project=PluginProjectBase(
                    name="3-Band EQ",
                    description="A three-band parametric equalizer",
                    ui_components=[
                        control("eq-low-freq", "Low Freq", 0, "low_freq", min=20, max=500, value=100),
                        control("eq-low-gain", "Low Gain", 1, "low_gain", min=-12, max=12, value=0),
                        control("eq-mid-freq", "Mid Freq", 2, "mid_freq", min=200, max=5_000, value=1_000),
                        control("eq-mid-gain", "Mid Gain", 3, "mid_gain", min=-12, max=12, value=0),
                        control("eq-mid-q", "Mid Q", 4, "mid_q", min=0.1, max=10, value=1),
                        control("eq-high-freq", "High Freq", 5, "high_freq", min=2_000, max=20_000, value=8_000),
                        control("eq-high-gain", "High Gain", 6, "high_gain", min=-12, max=12, value=0),
                    ],
                    dsp_graph=DSPGraph(
                        nodes=[
                            node("eq-input", "input", "Input", 0, inputs=[]),
                            node(
                                "eq-low",
                                "filter",
                                "Low Shelf",
                                1,
                                parameters=[
                                    param("eq-low-freq-param", "Low Freq", min=20, max=500, value=100, unit="Hz"),
                                    param("eq-low-gain-param", "Low Gain", min=-12, max=12, value=0, unit="dB"),
                                ],
                            ),
                            node(
                                "eq-mid",
                                "filter",
                                "Mid Peak",
                                2,
                                parameters=[
                                    param("eq-mid-freq-param", "Mid Freq", min=200, max=5_000, value=1_000, unit="Hz"),
                                    param("eq-mid-gain-param", "Mid Gain", min=-12, max=12, value=0, unit="dB"),
                                    param("eq-mid-q-param", "Mid Q", min=0.1, max=10, value=1),
                                ],
                            ),
                            node(
                                "eq-high",
                                "filter",
                                "High Shelf",
                                3,
                                parameters=[
                                    param(
                                        "eq-high-freq-param", "High Freq", min=2_000, max=20_000, value=8_000, unit="Hz"
                                    ),
                                    param("eq-high-gain-param", "High Gain", min=-12, max=12, value=0, unit="dB"),
                                ],
                            ),
                            node("eq-output", "output", "Output", 4, outputs=[]),
                        ],
                        connections=[
                            DSPConnection(
                                id="eq-unwired",
                                source_node_id="  ",
                                source_port="out",
                                target_node_id="\t",
                                target_port="in",
                            )
                        ],
                    ),
                    code=CodeFiles(dsp="// EQ DSP code\n"),
                    settings=PluginSettings(width=750, height=250),
                ),
            ),
            PluginTemplate(
                id="template-reverb",
                name="Algorithmic Reverb",
                category=TemplateCategory.EFFECT,
                description="Algorithmic reverb with room size, damping, and modulation",
                tags=["reverb", "space", "ambience"],
                project=PluginProjectBase(
                    name="Reverb",
                    description="An algorithmic reverb effect",
                    ui_components=[
                        control("reverb-room-size", "Room Size", 0, "room_size", min=0, max=1, value=0.5),
                        control("reverb-damping", "Damping", 1, "damping", min=0, max=1, value=0.5),
                        control("reverb-width", "Width", 2, "width", min=0, max=1, value=1),
                        control("reverb-mix", "Mix", 3, "mix", min=0, max=1, value=0.3),
                    ],
                    dsp_graph=DSPGraph(
                        nodes=[
                            node("reverb-input", "input", "Input", 0, inputs=[]),
                            node(
                                "reverb-core",
                                "reverb",
                                "Reverb",
                                1,
                                parameters=[
                                    param("reverb-room-size-param", "Room Size", min=0, max=1, value=0.5),
                                    param("reverb-damping-param", "Damping", min=0, max=1, value=0.5),
                                    param("reverb-width-param", "Width", min=0, max=1, value=1),
                                ],
                            ),
                            node(
                                "reverb-mixer",
                                "mixer",
                                "Mix",
                                2,
                                parameters=[param("reverb-mix-param", "Mix", min=0, max=1, value=0.3)],
                            ),
                            node("reverb-output", "output", "Output", 3, outputs=[]),
                        ],
                    ),
                    code=CodeFiles(dsp="// Reverb DSP code\n"),
                    settings=PluginSettings(width=450, height=250),
                ),
            ),
            PluginTemplate(
                id="template-analyzer",
                name="Signal Analyzer",
                category=TemplateCategory.UTILITY,
                description="Pass-through utility with spectrum display and analysis smoothing",
                tags=["utility", "analyzer", "metering"],
                project=PluginProjectBase(
                    name="Signal Analyzer",
                    description="A spectrum analyzer utility",
                    ui_components=[
                        control("analyzer-display", "Spectrum", 0, component_type="waveform"),
                        control("analyzer-fft-size", "FFT Size", 0, "fft_size", row=1, min=256, max=8_192, value=2_048),
                        control("analyzer-smoothing", "Smoothing", 1, "smoothing", row=1, min=0, max=1, value=0.8),
                    ],
                    dsp_graph=DSPGraph(
                        nodes=[
                            node("analyzer-input", "input", "Input", 0, inputs=[]),
                            node(
                                "analyzer-core",
                                "custom",
                                "Analyzer",
                                1,
                                parameters=[
                                    param(
                                        "analyzer-fft-size-param",
                                        "FFT Size",
                                        type=ParameterType.INT,
                                        min=256,
                                        max=8_192,
                                        value=2_048,
                                    ),
                                    param("analyzer-smoothing-param", "Smoothing", min=0, max=1, value=0.8),
                                ],
                            ),
                            node("analyzer-output", "output", "Output", 2, outputs=[]),
                        ],
                        connections=[wire("analyzer-wire-1", "analyzer-input", "analyzer-core")],
                    ),
                    code=CodeFiles(dsp="// Analyzer DSP code\n"),
                    settings=PluginSettings(width=400, height=350),
                ),
            ),
            PluginTemplate(
                id="template-lfo-modulator",
                name="LFO Modulator",
                category=TemplateCategory.MODULATION,
                description="Tremolo-style amplitude modulation driven by a low-frequency oscillator",
                tags=["lfo", "tremolo", "modulation"],
                project=PluginProjectBase(
                    name="LFO Modulator",
                    description="An LFO driven amplitude modulator",
                    ui_components=[
                        control("lfo-rate", "Rate", 0, "lfo_rate", min=0.01, max=20, value=1),
                        control("lfo-depth", "Depth", 1, "lfo_depth", min=0, max=1, value=0.5),
                        control("lfo-shape", "Shape", 2, "lfo_shape", component_type="button"),
                    ],
                    dsp_graph=DSPGraph(
                        nodes=[
                            node("lfo-input", "input", "Input", 0, inputs=[]),
                            node(
                                "lfo-core",
                                "lfo",
                                "LFO",
                                1,
                                inputs=[],
                                parameters=[
                                    param("lfo-rate-param", "Rate", min=0.01, max=20, value=1, unit="Hz"),
                                    param("lfo-depth-param", "Depth", min=0, max=1, value=0.5),
                                    param(
                                        "lfo-shape-param",
                                        "Shape",
                                        type=ParameterType.ENUM,
                                        value="sine",
                                        options=["sine", "triangle", "square"],
                                    ),
                                ],
                            ),
                            node(
                                "lfo-vca",
                                "gain",
                                "VCA",
                                2,
                                inputs=["in", "gain_mod"],
                                parameters=[param("lfo-vca-gain", "Gain", min=0, max=1, value=1)],
                            ),
                            node("lfo-output", "output", "Output", 3, outputs=[]),
                        ],
                        connections=[
                            wire("lfo-wire-1", "lfo-input", "lfo-vca"),
                            wire("lfo-wire-2", "lfo-core", "lfo-vca", target_port="gain_mod"),
                            wire("lfo-wire-3", "lfo-vca", "lfo-output"),
                        ],
                    ),
                    code=CodeFiles(dsp="// LFO modulator DSP code\n"),
                    settings=PluginSettings(width=400, height=250),
                ),
            ),
        ]
