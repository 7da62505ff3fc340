"""Typed tree of a declarative UI specification.

`parse_specification` turns an untrusted JSON value into a tree of nodes. Parsing never raises:
anything malformed becomes a placeholder node, and the tree is bounded by `ParseLimits` no matter
how deep or wide the input is.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Literal

__all__ = [
    'ComponentType',
    'CONTAINER_TYPES',
    'Layout',
    'ParseLimits',
    'ContainerNode',
    'LeafNode',
    'UnknownNode',
    'InvalidNode',
    'TruncatedNode',
    'UINode',
    'parse_specification',
    'prune_specification',
]

_LOGGER: logging.Logger = logging.getLogger(__name__)


class ComponentType(str, Enum):
    """Component tags understood by the renderer."""

    CONTAINER = 'container'
    CARD = 'card'
    GRID = 'grid'
    HEADING = 'heading'
    TEXT = 'text'
    BUTTON = 'button'
    IMAGE = 'image'
    LIST = 'list'
    BADGE = 'badge'
    DIVIDER = 'divider'
    SPACER = 'spacer'
    METRIC = 'metric'
    PROGRESS = 'progress'
    LINK = 'link'
    ALERT = 'alert'
    CODE = 'code'
    TABLE = 'table'


CONTAINER_TYPES: Final[frozenset[ComponentType]] = frozenset(
    {ComponentType.CONTAINER, ComponentType.CARD, ComponentType.GRID}
)
"""Components whose `children` are rendered."""

Layout = Literal['vertical', 'horizontal', 'grid']

_LAYOUTS: Final[frozenset[str]] = frozenset({'vertical', 'horizontal', 'grid'})

# Nesting kept in the raw copy of an unknown component.
_RAW_DEPTH: Final[int] = 4
_RAW_ITEMS: Final[int] = 20

# Nesting kept inside props and style by `prune_specification`.
_VALUE_DEPTH: Final[int] = 8


@dataclass(frozen=True)
class ParseLimits:
    """Bounds applied while parsing a specification."""

    max_depth: int = 12
    """Deepest nesting level parsed; the root is at depth 1."""
    max_children: int = 100
    """Children kept per container."""
    max_nodes: int = 1000
    """Nodes parsed per tree."""


@dataclass
class ContainerNode:
    component: ComponentType
    props: dict[str, Any] = field(default_factory=dict)
    children: list[UINode] = field(default_factory=list)
    layout: Layout | None = None
    style: dict[str, Any] = field(default_factory=dict)


@dataclass
class LeafNode:
    component: ComponentType
    props: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)


@dataclass
class UnknownNode:
    """A component tag the renderer does not know, kept for diagnosis."""

    component: str
    raw: Any


@dataclass
class InvalidNode:
    """A node without a usable `component` tag."""

    reason: str
    raw: Any = None


@dataclass
class TruncatedNode:
    """Marks where parsing stopped because a limit was reached."""

    reason: str


UINode = ContainerNode | LeafNode | UnknownNode | InvalidNode | TruncatedNode


def parse_specification(spec: Any, limits: ParseLimits | None = None) -> UINode:
    """Parse a specification into a UI tree.

    Keys other than `component`, `props`, `children`, `layout` and `style` are ignored, so the
    `version` of an envelope can be passed along with the tree.

    Args:
        spec: The decoded JSON value.
        limits: Parse bounds, `ParseLimits()` by default.

    Returns:
        The root node.
    """
    parser = _Parser(limits or ParseLimits())
    return parser.parse(spec, depth=1)


def prune_specification(spec: Mapping[str, Any], limits: ParseLimits | None = None) -> dict[str, Any]:
    """Copy a specification, cut down to what `parse_specification` keeps.

    Nodes deeper than `max_depth` keep only their `component` tag, so they still parse to a
    truncation placeholder. Malformed children and children past `max_children + 1` are dropped,
    and values inside props and style are cut below a fixed nesting depth. Parsing the copy gives
    the same tree as parsing the original, apart from the raw copies kept on placeholder nodes,
    and its nesting stays small enough to be encoded as a single JSON document.

    Args:
        spec: The specification object.
        limits: Parse bounds, `ParseLimits()` by default.
    """
    return _prune_node(spec, 1, limits or ParseLimits())


@dataclass
class _Parser:
    limits: ParseLimits
    nodes: int = 0

    def parse(self, spec: Any, depth: int) -> UINode:
        if not isinstance(spec, Mapping):
            return InvalidNode('specification is not an object', _raw_copy(spec))
        component = spec.get('component')
        if not isinstance(component, str) or not component:
            return InvalidNode('component type is missing or invalid', _raw_copy(spec))

        if depth > self.limits.max_depth:
            _LOGGER.warning('specification deeper than %d levels, truncating', self.limits.max_depth)
            return TruncatedNode(f'nesting deeper than {self.limits.max_depth} levels')
        if self.nodes >= self.limits.max_nodes:
            return TruncatedNode(f'more than {self.limits.max_nodes} components')
        self.nodes += 1

        try:
            component_type = ComponentType(component)
        except ValueError:
            _LOGGER.warning('unknown component %r', component)
            return UnknownNode(component, _raw_copy(spec))

        props = _mapping(spec.get('props'))
        style = _mapping(spec.get('style'))
        if component_type not in CONTAINER_TYPES:
            return LeafNode(component_type, props, style)

        layout = spec.get('layout')
        return ContainerNode(
            component_type,
            props,
            self._children(spec.get('children'), depth),
            layout if layout in _LAYOUTS else None,
            style,
        )

    def _children(self, children: Any, depth: int) -> list[UINode]:
        if not isinstance(children, list):
            return []

        result: list[UINode] = []
        for child in children:
            if not _well_formed(child):
                _LOGGER.debug('skipping malformed child %r', type(child).__name__)
                continue
            if len(result) >= self.limits.max_children:
                result.append(TruncatedNode(f'more than {self.limits.max_children} children'))
                break
            node = self.parse(child, depth + 1)
            result.append(node)
            if isinstance(node, TruncatedNode) and self.nodes >= self.limits.max_nodes:
                break
        return result


def _well_formed(child: Any) -> bool:
    return isinstance(child, Mapping) and isinstance(child.get('component'), str)


def _prune_node(spec: Mapping[str, Any], depth: int, limits: ParseLimits) -> dict[str, Any]:
    if depth > limits.max_depth:
        return {'component': spec.get('component')}

    pruned: dict[str, Any] = {}
    for key, value in spec.items():
        if key == 'children' and isinstance(value, list):
            children = [child for child in value if _well_formed(child)][: limits.max_children + 1]
            pruned[key] = [_prune_node(child, depth + 1, limits) for child in children]
        else:
            pruned[str(key)] = _prune_value(value, _VALUE_DEPTH)
    return pruned


def _prune_value(value: Any, depth: int) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _prune_value(v, depth - 1) for k, v in value.items()} if depth > 0 else None
    if isinstance(value, list):
        return [_prune_value(v, depth - 1) for v in value] if depth > 0 else None
    return value


def _mapping(value: Any) -> dict[str, Any]:
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    return {}


def _raw_copy(value: Any, depth: int = _RAW_DEPTH) -> Any:
    """Copy of a JSON value cut at a fixed depth and breadth, safe to serialize."""
    if isinstance(value, Mapping):
        if depth <= 0:
            return '{...}'
        items = list(value.items())
        copy = {str(k): _raw_copy(v, depth - 1) for k, v in items[:_RAW_ITEMS]}
        if len(items) > _RAW_ITEMS:
            copy['...'] = f'{len(items) - _RAW_ITEMS} more'
        return copy
    if isinstance(value, list):
        if depth <= 0:
            return '[...]'
        copy_list = [_raw_copy(v, depth - 1) for v in value[:_RAW_ITEMS]]
        if len(value) > _RAW_ITEMS:
            copy_list.append(f'... {len(value) - _RAW_ITEMS} more')
        return copy_list
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)
