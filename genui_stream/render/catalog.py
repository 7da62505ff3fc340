"""Renderers of the fixed UI catalog, and of whole conversations.

Each `ToolName` maps to exactly one renderer; the registry is checked when this module is
imported so a catalog tool without a renderer fails at startup rather than at render time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Final

from markupsafe import Markup
from pydantic import BaseModel, ValidationError

from ..catalog import (
    TOOL_ARGS,
    CardGridArgs,
    ChartArgs,
    ProgressTrackerArgs,
    TaskListArgs,
    ToolName,
    WeatherCardArgs,
)
from ..client.conversation import (
    AssistantTextEntry,
    Conversation,
    ErrorEntry,
    ToolCallEntry,
    UISpecEntry,
    UserEntry,
)
from .html import error_placeholder, render_html, safe_url

__all__ = ['render_tool_call', 'render_conversation']

_LOGGER: logging.Logger = logging.getLogger(__name__)


def _render_chart(args: ChartArgs) -> Markup:
    rows = Markup('').join(
        Markup('<tr><th scope="row">{}</th><td data-value="{}">{}</td></tr>').format(
            point.name, point.value, f'{point.value:g}'
        )
        for point in args.data
    )
    return Markup(
        '<figure class="genui-chart genui-chart-{}"><figcaption>{}</figcaption><table>{}</table></figure>'
    ).format(args.type, args.title, rows)


def _render_weather_card(args: WeatherCardArgs) -> Markup:
    forecast = Markup('').join(
        Markup(
            '<li class="genui-forecast-day"><span>{}</span><span>{}</span><span>{}°/{}°</span></li>'
        ).format(day.day, day.condition, f'{day.high:g}', f'{day.low:g}')
        for day in args.forecast
    )
    return Markup(
        '<div class="genui-weather"><h3>{}</h3>'
        '<div class="genui-weather-now"><span class="genui-temperature">{}°F</span><span>{}</span></div>'
        '<dl><dt>Humidity</dt><dd>{}%</dd><dt>Wind</dt><dd>{} mph</dd></dl>'
        '<ul class="genui-forecast">{}</ul></div>'
    ).format(
        args.city,
        f'{args.temperature:g}',
        args.condition,
        f'{args.humidity:g}',
        f'{args.wind_speed:g}',
        forecast,
    )


def _render_task_list(args: TaskListArgs) -> Markup:
    tasks = Markup('').join(
        Markup('<li class="genui-task genui-priority-{}{}"><input type="checkbox" disabled{}> {}</li>').format(
            task.priority,
            Markup(' genui-task-done') if task.completed else Markup(''),
            Markup(' checked') if task.completed else Markup(''),
            task.text,
        )
        for task in args.tasks
    )
    done = sum(task.completed for task in args.tasks)
    return Markup('<div class="genui-tasks"><h3>{}</h3><p>{} of {} completed</p><ul>{}</ul></div>').format(
        args.title, done, len(args.tasks), tasks
    )


def _render_card_grid(args: CardGridArgs) -> Markup:
    cards: list[Markup] = []
    for card in args.cards:
        image = safe_url(card.image, frozenset({'http', 'https'})) if card.image else None
        tags = Markup('').join(Markup('<span class="genui-badge genui-badge-blue">{}</span>').format(t) for t in card.tags)
        cards.append(
            Markup('<div class="genui-card">{}<h4>{}</h4><p>{}</p><div class="genui-tags">{}</div></div>').format(
                Markup('<img src="{}" alt="{}">').format(image, card.title) if image else Markup(''),
                card.title,
                card.description,
                tags,
            )
        )
    return Markup('<div class="genui-card-grid"><h3>{}</h3><div class="genui-grid">{}</div></div>').format(
        args.title, Markup('').join(cards)
    )


def _render_progress_tracker(args: ProgressTrackerArgs) -> Markup:
    steps = Markup('').join(
        Markup('<li class="genui-step genui-step-{}"><strong>{}</strong><p>{}</p></li>').format(
            step.status, step.name, step.description
        )
        for step in args.steps
    )
    done = sum(step.status == 'completed' for step in args.steps)
    percent = round(100 * done / len(args.steps)) if args.steps else 0
    return Markup(
        '<div class="genui-progress-tracker"><h3>{}</h3>'
        '<div class="genui-progress-track"><div class="genui-progress-bar" style="width: {}%"></div></div>'
        '<ol>{}</ol></div>'
    ).format(args.title, percent, steps)


_RENDERERS: Final[dict[ToolName, Callable[[Any], Markup]]] = {
    ToolName.CHART: _render_chart,
    ToolName.WEATHER_CARD: _render_weather_card,
    ToolName.TASK_LIST: _render_task_list,
    ToolName.CARD_GRID: _render_card_grid,
    ToolName.PROGRESS_TRACKER: _render_progress_tracker,
}


def _check_registry(renderers: Mapping[ToolName, object]) -> None:
    missing = [name.value for name in ToolName if name not in renderers]
    if missing:
        raise RuntimeError(f'no renderer registered for catalog tools: {", ".join(missing)}')


_check_registry(_RENDERERS)


def render_tool_call(name: str, args: Mapping[str, Any]) -> Markup:
    """Render a fixed-catalog tool call.

    Args:
        name: The tool name.
        args: The parsed tool arguments.

    Returns:
        The component markup, or a placeholder for unknown tools and invalid arguments.
    """
    try:
        tool = ToolName(name)
    except ValueError:
        _LOGGER.warning('unknown tool %r', name)
        return error_placeholder('Unknown tool', name)

    args_model: type[BaseModel] = TOOL_ARGS[tool]
    try:
        parsed = args_model.model_validate(args)
    except ValidationError as e:
        _LOGGER.warning('invalid arguments for %s: %s', name, e)
        return error_placeholder(f'Invalid arguments for {name}', f'{e.error_count()} validation error(s)')
    return _RENDERERS[tool](parsed)


def render_conversation(conversation: Conversation) -> Markup:
    """Render every entry of a conversation, in order."""
    parts: list[Markup] = []
    for entry in conversation.entries:
        match entry:
            case UserEntry(content=content):
                parts.append(Markup('<div class="genui-message genui-user">{}</div>').format(content))
            case AssistantTextEntry(content=content):
                parts.append(Markup('<div class="genui-message genui-assistant">{}</div>').format(content))
            case ToolCallEntry(tool_name=tool_name, args=args):
                parts.append(render_tool_call(tool_name, args))
            case UISpecEntry(tree=tree):
                parts.append(render_html(tree))
            case ErrorEntry(message=message, code=code):
                parts.append(
                    Markup('<div class="genui-error" data-code="{}"><strong>Error</strong><p>{}</p></div>').format(
                        code, message
                    )
                )
    if conversation.loading:
        parts.append(Markup('<div class="genui-loading" aria-busy="true"></div>'))
    return Markup('<div class="genui-conversation">{}</div>').format(Markup('').join(parts))
