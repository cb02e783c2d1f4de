from __future__ import annotations

import logging
import re
from typing import Mapping, Sequence

from backend.app.models.plugin import DSPNode, DSPParameter, UIComponent

logger = logging.getLogger(__name__)

PARAMETER_PROPERTY_KEY = "parameter"
BOUND_PROPERTY_KEYS = ("min", "max", "value")

DEFAULT_PARAMETER_ALIASES: dict[str, tuple[str, ...]] = {
    "frequency": ("cutoff", "freq", "frequency"),
    "Q": ("resonance", "q", "res"),
    "attack": ("attack", "atk"),
    "decay": ("decay", "dec"),
    "sustain": ("sustain", "sus"),
    "release": ("release", "rel"),
    "gain": ("gain", "level", "volume", "vol"),
    "mix": ("mix", "wet", "blend"),
}

_WHITESPACE_RUN = re.compile(r"\s+")
_MODULE_PREFIX = re.compile(r"^(filter|env|envelope|lfo|osc|oscillator|comp|compressor)_")


def normalize_parameter_name(name: str) -> str:
    return _WHITESPACE_RUN.sub("_", name.lower())


def map_ui_components_to_parameters(
    components: Sequence[UIComponent],
    nodes: Sequence[DSPNode],
    aliases: Mapping[str, Sequence[str]] | None = None,
) -> list[UIComponent]:
    """Bind each widget to the first DSP parameter whose name loosely matches its ``parameter`` property.

    Matching is a linear scan over nodes, then each node's parameters. A parameter matches when
    its normalized name equals the lowercased search name or either contains the other. The first
    hit wins; there is no scoring between candidates.

    ``aliases`` enables the synonym table lookup (see ``DEFAULT_PARAMETER_ALIASES``) and strips a
    leading module prefix such as ``filter_`` from the search name.
    """
    return [_bind_component(component, nodes, aliases) for component in components]


def _bind_component(
    component: UIComponent,
    nodes: Sequence[DSPNode],
    aliases: Mapping[str, Sequence[str]] | None,
) -> UIComponent:
    search_name = component.properties.get(PARAMETER_PROPERTY_KEY)
    if not isinstance(search_name, str) or not search_name:
        return component

    needle = search_name.lower()
    if aliases is not None:
        needle = _MODULE_PREFIX.sub("", needle)

    for node in nodes:
        for parameter in node.parameters:
            if _matches(normalize_parameter_name(parameter.name), needle, aliases):
                logger.debug(
                    "Bound component '%s' (%s) to parameter '%s' on node '%s'",
                    component.id,
                    search_name,
                    parameter.id,
                    node.id,
                )
                return _apply_parameter(component, parameter)

    logger.debug("No parameter matches component '%s' (%s)", component.id, search_name)
    return component


def _matches(candidate: str, needle: str, aliases: Mapping[str, Sequence[str]] | None) -> bool:
    if candidate == needle:
        return True
    if aliases is not None:
        for canonical, synonyms in aliases.items():
            if candidate == canonical.lower() and needle in synonyms:
                return True
    return needle in candidate or candidate in needle


def _apply_parameter(component: UIComponent, parameter: DSPParameter) -> UIComponent:
    properties = dict(component.properties)
    for key in BOUND_PROPERTY_KEYS:
        bound = getattr(parameter, key)
        # 0 and False are real bounds; only a missing attribute keeps the widget's own value.
        if bound is not None:
            properties[key] = bound
    return component.model_copy(update={"parameter_id": parameter.id, "properties": properties})
