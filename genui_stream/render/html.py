"""HTML rendering of UI trees.

Everything the model produced is data: text is escaped by `markupsafe`, URLs are checked against
a scheme allow-list and style mappings are filtered property by property. Unknown or malformed
input renders a placeholder instead of raising.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Final
from urllib.parse import urlsplit

import pydantic_core
from markupsafe import Markup, escape

from .spec import (
    ComponentType,
    ContainerNode,
    InvalidNode,
    LeafNode,
    TruncatedNode,
    UINode,
    UnknownNode,
)

__all__ = ['render_html', 'safe_url', 'style_attribute', 'error_placeholder']

HEADING_LEVELS: Final[range] = range(1, 7)
GRID_COLUMNS: Final[range] = range(1, 7)
BADGE_COLORS: Final[frozenset[str]] = frozenset({'blue', 'green', 'red', 'yellow', 'purple', 'gray', 'orange'})
PROGRESS_COLORS: Final[frozenset[str]] = frozenset({'blue', 'green', 'red', 'yellow', 'purple'})
ALERT_ICONS: Final[dict[str, str]] = {
    'info': 'ℹ️',
    'success': '✅',
    'warning': '⚠️',
    'error': '❌',
}

DEFAULT_HEADING_LEVEL: Final[int] = 2
DEFAULT_GRID_COLUMNS: Final[int] = 2
DEFAULT_BADGE_COLOR: Final[str] = 'gray'
DEFAULT_PROGRESS_COLOR: Final[str] = 'blue'
DEFAULT_ALERT_TYPE: Final[str] = 'info'
DEFAULT_SPACER_HEIGHT: Final[int] = 16
DEFAULT_LAYOUT: Final[str] = 'vertical'

_LINK_SCHEMES: Final[frozenset[str]] = frozenset({'http', 'https', 'mailto'})
_IMAGE_SCHEMES: Final[frozenset[str]] = frozenset({'http', 'https'})

# camelCase style keys accepted, mapped to their CSS property
_STYLE_PROPERTIES: Final[dict[str, str]] = {
    'color': 'color',
    'backgroundColor': 'background-color',
    'fontSize': 'font-size',
    'fontWeight': 'font-weight',
    'fontStyle': 'font-style',
    'textAlign': 'text-align',
    'lineHeight': 'line-height',
    'padding': 'padding',
    'paddingTop': 'padding-top',
    'paddingBottom': 'padding-bottom',
    'paddingLeft': 'padding-left',
    'paddingRight': 'padding-right',
    'margin': 'margin',
    'marginTop': 'margin-top',
    'marginBottom': 'margin-bottom',
    'marginLeft': 'margin-left',
    'marginRight': 'margin-right',
    'border': 'border',
    'borderColor': 'border-color',
    'borderRadius': 'border-radius',
    'width': 'width',
    'maxWidth': 'max-width',
    'height': 'height',
    'gap': 'gap',
    'opacity': 'opacity',
}
_UNITLESS_PROPERTIES: Final[frozenset[str]] = frozenset({'fontWeight', 'lineHeight', 'opacity'})
_STYLE_VALUE: Final[re.Pattern[str]] = re.compile(r'^[#\w\s.,%()+-]{1,100}$')
_STYLE_FORBIDDEN: Final[re.Pattern[str]] = re.compile(r'url|expression|var|attr|image', re.IGNORECASE)


def render_html(node: UINode) -> Markup:
    """Render a UI tree to HTML.

    Args:
        node: The root of the tree, as returned by `parse_specification`.

    Returns:
        The HTML markup.
    """
    match node:
        case ContainerNode():
            return _render_container(node)
        case LeafNode():
            return _render_leaf(node)
        case UnknownNode(component=component, raw=raw):
            return Markup(
                '<div class="genui-unknown"><p>Unknown component: {}</p>'
                '<details><summary>View specification</summary><pre>{}</pre></details></div>'
            ).format(component, _dump(raw))
        case TruncatedNode(reason=reason):
            return Markup('<div class="genui-truncated">Content truncated: {}</div>').format(reason)
        case InvalidNode(reason=reason):
            return error_placeholder('Invalid component', reason)
        case _:
            return error_placeholder('Invalid component', f'unsupported node {type(node).__name__}')


def error_placeholder(title: str, detail: str) -> Markup:
    """Placeholder shown in place of something that cannot be rendered."""
    return Markup('<div class="genui-error"><strong>{}</strong><p>{}</p></div>').format(title, detail)


def _render_container(node: ContainerNode) -> Markup:
    children = Markup('').join(render_html(child) for child in node.children)
    style = style_attribute(node.style)
    match node.component:
        case ComponentType.CARD:
            return Markup('<div class="genui-card"{}>{}</div>').format(style, children)
        case ComponentType.GRID:
            columns = _integer(node.props.get('columns'), DEFAULT_GRID_COLUMNS)
            if columns not in GRID_COLUMNS:
                columns = DEFAULT_GRID_COLUMNS
            return Markup('<div class="genui-grid genui-cols-{}"{}>{}</div>').format(columns, style, children)
        case _:
            layout = node.layout or DEFAULT_LAYOUT
            return Markup('<div class="genui-container genui-layout-{}"{}>{}</div>').format(
                layout, style, children
            )


def _render_leaf(node: LeafNode) -> Markup:  # noqa: C901
    props = node.props
    style = style_attribute(node.style)
    match node.component:
        case ComponentType.HEADING:
            level = min(max(_integer(props.get('level'), DEFAULT_HEADING_LEVEL), 1), 6)
            return Markup('<h{0} class="genui-heading"{1}>{2}</h{0}>').format(level, style, _text(props.get('text')))
        case ComponentType.TEXT:
            return Markup('<p class="genui-text"{}>{}</p>').format(style, _text(props.get('content')))
        case ComponentType.BUTTON:
            return Markup('<button type="button" class="genui-button"{}>{}</button>').format(
                style, _text(props.get('label'))
            )
        case ComponentType.IMAGE:
            alt = _text(props.get('alt'))
            src = safe_url(props.get('src'), _IMAGE_SCHEMES)
            if src is None:
                return Markup('<span class="genui-image genui-blocked"{}>{}</span>').format(style, alt)
            return Markup('<img class="genui-image" src="{}" alt="{}"{}>').format(src, alt, style)
        case ComponentType.LIST:
            items = props.get('items')
            rendered = Markup('').join(
                Markup('<li>{}</li>').format(_text(item)) for item in (items if isinstance(items, list) else [])
            )
            return Markup('<ul class="genui-list"{}>{}</ul>').format(style, rendered)
        case ComponentType.BADGE:
            color = _choice(props.get('color'), BADGE_COLORS, DEFAULT_BADGE_COLOR)
            return Markup('<span class="genui-badge genui-badge-{}"{}>{}</span>').format(
                color, style, _text(props.get('text'))
            )
        case ComponentType.DIVIDER:
            return Markup('<hr class="genui-divider"{}>').format(style)
        case ComponentType.SPACER:
            height = max(_integer(props.get('height'), DEFAULT_SPACER_HEIGHT), 0)
            return Markup('<div class="genui-spacer" style="height: {}px"></div>').format(height)
        case ComponentType.METRIC:
            return Markup(
                '<div class="genui-metric"{}><div class="genui-metric-value">{}</div>'
                '<div class="genui-metric-label">{}</div></div>'
            ).format(style, _text(props.get('value')), _text(props.get('label')))
        case ComponentType.PROGRESS:
            value = min(max(_number(props.get('value'), 0), 0), 100)
            color = _choice(props.get('color'), PROGRESS_COLORS, DEFAULT_PROGRESS_COLOR)
            label = _text(props.get('label'))
            label_html = Markup('<div class="genui-progress-label">{}</div>').format(label) if label else Markup('')
            return Markup(
                '<div class="genui-progress genui-progress-{}"{}>{}'
                '<div class="genui-progress-track"><div class="genui-progress-bar" style="width: {}%"></div></div>'
                '</div>'
            ).format(color, style, label_html, f'{value:g}')
        case ComponentType.LINK:
            text = _text(props.get('text')) or _text(props.get('url'))
            href = safe_url(props.get('url'), _LINK_SCHEMES)
            if href is None:
                return Markup('<span class="genui-link genui-blocked"{}>{}</span>').format(style, text)
            target = Markup(' target="_blank" rel="noopener noreferrer"') if props.get('newTab') is True else Markup('')
            return Markup('<a class="genui-link" href="{}"{}{}>{}</a>').format(href, target, style, text)
        case ComponentType.ALERT:
            alert_type = _choice(props.get('type'), frozenset(ALERT_ICONS), DEFAULT_ALERT_TYPE)
            title = _text(props.get('title'))
            message = _text(props.get('message'))
            return Markup('<div class="genui-alert genui-alert-{}" role="alert"{}><span>{}</span>{}{}</div>').format(
                alert_type,
                style,
                ALERT_ICONS[alert_type],
                Markup('<h4>{}</h4>').format(title) if title else Markup(''),
                Markup('<p>{}</p>').format(message) if message else Markup(''),
            )
        case ComponentType.CODE:
            return Markup('<pre class="genui-code"{}><code>{}</code></pre>').format(style, _text(props.get('content')))
        case ComponentType.TABLE:
            return _render_table(props, style)
        case _:
            return error_placeholder('Unsupported component', node.component.value)


def _render_table(props: Mapping[str, Any], style: Markup) -> Markup:
    headers = props.get('headers')
    rows = props.get('rows')
    head = Markup('')
    if isinstance(headers, list) and headers:
        cells = Markup('').join(Markup('<th>{}</th>').format(_text(header)) for header in headers)
        head = Markup('<thead><tr>{}</tr></thead>').format(cells)
    body = Markup('').join(
        Markup('<tr>{}</tr>').format(Markup('').join(Markup('<td>{}</td>').format(_text(cell)) for cell in row))
        for row in (rows if isinstance(rows, list) else [])
        if isinstance(row, list)
    )
    return Markup('<table class="genui-table"{}>{}<tbody>{}</tbody></table>').format(style, head, body)


def safe_url(value: Any, schemes: frozenset[str] = _LINK_SCHEMES) -> str | None:
    """Return the URL if it is relative or uses one of `schemes`, otherwise `None`."""
    if not isinstance(value, str):
        return None
    url = value.strip()
    if not url or any(ord(char) < 0x20 for char in url):
        return None
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme:
        # protocol-relative URLs name another host
        return None if url.startswith('//') or url.startswith('\\') else url
    return url if parts.scheme.lower() in schemes else None


def style_attribute(style: Mapping[str, Any]) -> Markup:
    """Build a `style` attribute from an allow-listed subset of a style mapping."""
    declarations: list[str] = []
    for key, value in style.items():
        css_property = _STYLE_PROPERTIES.get(key)
        if css_property is None:
            continue
        if isinstance(value, bool) or (isinstance(value, int) and abs(value) >= 2**53):
            continue
        if isinstance(value, (int, float)):
            css_value = f'{value:g}' if key in _UNITLESS_PROPERTIES else f'{value:g}px'
        elif isinstance(value, str) and _STYLE_VALUE.match(value) and not _STYLE_FORBIDDEN.search(value):
            css_value = value.strip()
        else:
            continue
        declarations.append(f'{css_property}: {css_value}')
    if not declarations:
        return Markup('')
    return Markup(' style="{}"').format('; '.join(declarations))


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    try:
        return str(value)
    except ValueError:
        # ints longer than the interpreter's digit limit
        return ''


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return float(value) if abs(value) < 2**53 else default
    if isinstance(value, float):
        return value if value == value else default
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return default
        return number if number == number and abs(number) != float('inf') else default
    return default


def _integer(value: Any, default: int) -> int:
    number = _number(value, default)
    if abs(number) == float('inf'):
        return default
    return int(number)


def _choice(value: Any, choices: frozenset[str], default: str) -> str:
    return value if isinstance(value, str) and value in choices else default


def _dump(raw: Any) -> str:
    return pydantic_core.to_json(raw, indent=2, fallback=repr).decode()
