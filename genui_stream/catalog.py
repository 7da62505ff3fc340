"""Fixed UI catalog advertised to the model on the AGUI endpoint.

Each tool has an arguments model whose JSON schema is sent to the provider; the client validates
completed tool calls against the same models before rendering them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Final, Literal

from pydantic import BaseModel, Field
from pydantic_ai.tools import ToolDefinition

from .events import CamelBaseModel

__all__ = [
    'ToolName',
    'ChartPoint',
    'ChartArgs',
    'ForecastDay',
    'WeatherCardArgs',
    'TaskItem',
    'TaskListArgs',
    'CardItem',
    'CardGridArgs',
    'ProgressStep',
    'ProgressTrackerArgs',
    'TOOL_ARGS',
    'TOOL_DESCRIPTIONS',
    'RENDER_CUSTOM_UI',
    'catalog_tool_definitions',
    'custom_ui_tool_definition',
]


class ToolName(str, Enum):
    """Names of the fixed-catalog UI tools."""

    CHART = 'show_chart'
    WEATHER_CARD = 'show_weather_card'
    TASK_LIST = 'show_task_list'
    CARD_GRID = 'show_card_grid'
    PROGRESS_TRACKER = 'show_progress_tracker'


class ChartPoint(CamelBaseModel):
    name: str
    value: float


class ChartArgs(CamelBaseModel):
    title: str = Field(description='Chart title')
    type: Literal['bar', 'line', 'area', 'pie'] = Field(description='Chart type')
    data: list[ChartPoint] = Field(description='Data points for the chart')


class ForecastDay(CamelBaseModel):
    day: str
    high: float
    low: float
    condition: str


class WeatherCardArgs(CamelBaseModel):
    city: str = Field(description='City name')
    temperature: float = Field(description='Current temperature in Fahrenheit')
    condition: str = Field(description='Weather condition (sunny, cloudy, rainy, etc.)')
    humidity: float = Field(description='Humidity percentage')
    wind_speed: float = Field(description='Wind speed in mph')
    forecast: list[ForecastDay] = Field(description='3-day forecast')


class TaskItem(CamelBaseModel):
    id: str | None = None
    text: str
    completed: bool = False
    priority: Literal['low', 'medium', 'high'] = 'medium'


class TaskListArgs(CamelBaseModel):
    title: str = Field(description='Task list title')
    tasks: list[TaskItem] = Field(description='Array of tasks')


class CardItem(CamelBaseModel):
    title: str
    description: str = ''
    image: str | None = None
    tags: list[str] = Field(default_factory=list)


class CardGridArgs(CamelBaseModel):
    title: str = Field(description='Grid title')
    cards: list[CardItem] = Field(description='Array of cards to display')


class ProgressStep(CamelBaseModel):
    name: str
    status: Literal['pending', 'in-progress', 'completed'] = 'pending'
    description: str = ''


class ProgressTrackerArgs(CamelBaseModel):
    title: str = Field(description='Project title')
    steps: list[ProgressStep] = Field(description='Steps in the process')


TOOL_ARGS: Final[dict[ToolName, type[BaseModel]]] = {
    ToolName.CHART: ChartArgs,
    ToolName.WEATHER_CARD: WeatherCardArgs,
    ToolName.TASK_LIST: TaskListArgs,
    ToolName.CARD_GRID: CardGridArgs,
    ToolName.PROGRESS_TRACKER: ProgressTrackerArgs,
}
"""Arguments model of each catalog tool."""

TOOL_DESCRIPTIONS: Final[dict[ToolName, str]] = {
    ToolName.CHART: 'Display a chart with data visualization when user asks for charts, graphs, or data visualization',
    ToolName.WEATHER_CARD: 'Display a weather forecast card when user asks about weather',
    ToolName.TASK_LIST: 'Display an interactive task list or to-do list when user wants to track tasks',
    ToolName.CARD_GRID: 'Display a grid of cards with images and information when showing multiple items',
    ToolName.PROGRESS_TRACKER: 'Display a progress tracker for multi-step processes or projects',
}

RENDER_CUSTOM_UI: Final[str] = 'render_custom_ui'
"""Name of the single declarative UI tool."""

_SPECIFICATION_SCHEMA: Final[dict[str, Any]] = {
    'type': 'object',
    'description': 'Complete UI specification in A2UI format with component tree',
    'properties': {
        'component': {
            'type': 'string',
            'description': (
                'Root component type: container, card, list, grid, heading, text, button, image, '
                'badge, divider, spacer, metric, progress, alert, link, table, code'
            ),
        },
        'props': {
            'type': 'object',
            'description': 'Component properties (text, level, content, src, alt, label, color, items, columns, etc.)',
        },
        'children': {
            'type': 'array',
            'description': 'Array of child component specifications',
            'items': {'type': 'object'},
        },
        'layout': {
            'type': 'string',
            'enum': ['vertical', 'horizontal', 'grid'],
            'description': 'Layout direction for container components',
        },
        'style': {'type': 'object', 'description': 'Optional CSS style properties'},
    },
    'required': ['component'],
}


def catalog_tool_definitions() -> list[ToolDefinition]:
    """Tool definitions of the fixed catalog, in `ToolName` order."""
    return [
        ToolDefinition(
            name=name.value,
            description=TOOL_DESCRIPTIONS[name],
            parameters_json_schema=TOOL_ARGS[name].model_json_schema(by_alias=True),
        )
        for name in ToolName
    ]


def custom_ui_tool_definition() -> ToolDefinition:
    """Tool definition of `render_custom_ui`."""
    return ToolDefinition(
        name=RENDER_CUSTOM_UI,
        description=(
            'Generate a custom UI component specification for any visualization, dashboard, card, form, '
            'or interface. Use this to create dynamic, flexible UIs by specifying component hierarchy.'
        ),
        parameters_json_schema={
            'type': 'object',
            'properties': {'specification': _SPECIFICATION_SCHEMA},
            'required': ['specification'],
        },
    )
