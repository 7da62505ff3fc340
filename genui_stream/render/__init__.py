"""Rendering of generated UI: declarative trees and fixed-catalog tool calls."""

from __future__ import annotations

from .catalog import render_conversation, render_tool_call
from .html import error_placeholder, render_html, safe_url, style_attribute
from .spec import (
    CONTAINER_TYPES,
    ComponentType,
    ContainerNode,
    InvalidNode,
    LeafNode,
    ParseLimits,
    TruncatedNode,
    UINode,
    UnknownNode,
    parse_specification,
    prune_specification,
)

__all__ = [
    'CONTAINER_TYPES',
    'ComponentType',
    'ContainerNode',
    'InvalidNode',
    'LeafNode',
    'ParseLimits',
    'TruncatedNode',
    'UINode',
    'UnknownNode',
    'parse_specification',
    'prune_specification',
    'error_placeholder',
    'render_html',
    'safe_url',
    'style_attribute',
    'render_tool_call',
    'render_conversation',
]
