from __future__ import annotations

from typing import Any

import pytest
from inline_snapshot import snapshot

from genui_stream._enums import Role
from genui_stream.catalog import RENDER_CUSTOM_UI, ToolName, catalog_tool_definitions, custom_ui_tool_definition
from genui_stream.client.conversation import (
    AssistantTextEntry,
    Conversation,
    ErrorEntry,
    ToolCallEntry,
    UISpecEntry,
    UserEntry,
)
from genui_stream.consts import UI_ARTIFACT_PLACEHOLDER
from genui_stream.render import parse_specification, render_conversation, render_tool_call
from genui_stream.render.catalog import _check_registry  # pyright: ignore[reportPrivateUsage]
from genui_stream.request_types import ChatMessage

WEATHER_ARGS: dict[str, Any] = {
    'city': 'Paris',
    'temperature': 72,
    'condition': 'Sunny',
    'humidity': 40,
    'windSpeed': 5.5,
    'forecast': [{'day': 'Mon', 'high': 75, 'low': 60, 'condition': 'Cloudy'}],
}


def test_catalog_tool_definitions():
    definitions = catalog_tool_definitions()

    assert [definition.name for definition in definitions] == snapshot(
        ['show_chart', 'show_weather_card', 'show_task_list', 'show_card_grid', 'show_progress_tracker']
    )
    weather = definitions[1]
    assert weather.description == 'Display a weather forecast card when user asks about weather'
    assert 'windSpeed' in weather.parameters_json_schema['properties']
    assert set(weather.parameters_json_schema['required']) == snapshot(
        {'city', 'temperature', 'condition', 'humidity', 'windSpeed', 'forecast'}
    )
    chart = definitions[0]
    assert chart.parameters_json_schema['properties']['type']['enum'] == ['bar', 'line', 'area', 'pie']


def test_custom_ui_tool_definition():
    definition = custom_ui_tool_definition()

    assert definition.name == RENDER_CUSTOM_UI == 'render_custom_ui'
    assert definition.parameters_json_schema['required'] == ['specification']
    assert definition.parameters_json_schema['properties']['specification']['required'] == ['component']


def test_render_weather_card():
    html = str(render_tool_call('show_weather_card', WEATHER_ARGS))

    assert html.startswith('<div class="genui-weather"><h3>Paris</h3>')
    assert '72°F' in html
    assert '<dd>40%</dd>' in html
    assert '<dd>5.5 mph</dd>' in html
    assert '<span>Mon</span><span>Cloudy</span><span>75°/60°</span>' in html


def test_render_chart():
    args = {'title': 'Sales', 'type': 'bar', 'data': [{'name': 'Q1', 'value': 10}, {'name': '<Q2>', 'value': 12.5}]}

    assert str(render_tool_call('show_chart', args)) == snapshot(
        '<figure class="genui-chart genui-chart-bar"><figcaption>Sales</figcaption><table>'
        '<tr><th scope="row">Q1</th><td data-value="10.0">10</td></tr>'
        '<tr><th scope="row">&lt;Q2&gt;</th><td data-value="12.5">12.5</td></tr>'
        '</table></figure>'
    )


def test_render_task_list():
    args = {'title': 'Todo', 'tasks': [{'text': 'Write', 'completed': True, 'priority': 'high'}, {'text': 'Ship'}]}

    html = str(render_tool_call('show_task_list', args))

    assert '<p>1 of 2 completed</p>' in html
    assert (
        '<li class="genui-task genui-priority-high genui-task-done"><input type="checkbox" disabled checked> Write</li>'
        in html
    )
    assert '<li class="genui-task genui-priority-medium"><input type="checkbox" disabled> Ship</li>' in html


def test_render_card_grid_blocks_unsafe_images():
    args = {
        'title': 'Picks',
        'cards': [
            {'title': 'A', 'image': 'https://example.com/a.png', 'tags': ['new']},
            {'title': 'B', 'image': 'javascript:alert(1)'},
        ],
    }

    html = str(render_tool_call('show_card_grid', args))

    assert '<img src="https://example.com/a.png" alt="A">' in html
    assert 'javascript' not in html
    assert '<span class="genui-badge genui-badge-blue">new</span>' in html


def test_render_progress_tracker():
    args = {
        'title': 'Launch',
        'steps': [{'name': 'Plan', 'status': 'completed'}, {'name': 'Build', 'status': 'in-progress'}, {'name': 'Ship'}],
    }

    html = str(render_tool_call('show_progress_tracker', args))

    assert 'style="width: 33%"' in html
    assert '<li class="genui-step genui-step-pending"><strong>Ship</strong><p></p></li>' in html


def test_render_invalid_arguments():
    assert str(render_tool_call('show_weather_card', {'city': 'Paris'})) == snapshot(
        '<div class="genui-error"><strong>Invalid arguments for show_weather_card</strong>'
        '<p>5 validation error(s)</p></div>'
    )


def test_render_unknown_tool():
    assert str(render_tool_call('show_map', {})) == snapshot(
        '<div class="genui-error"><strong>Unknown tool</strong><p>show_map</p></div>'
    )


def test_every_tool_has_a_renderer():
    with pytest.raises(RuntimeError, match='no renderer registered for catalog tools: show_chart, show_weather_card'):
        _check_registry({})

    _check_registry({name: object() for name in ToolName})


def test_render_conversation():
    conversation = Conversation(
        entries=[
            UserEntry('<b>Weather?</b>'),
            AssistantTextEntry('m', 'Here you go', True),
            ToolCallEntry('c', 'show_weather_card', WEATHER_ARGS, 'm'),
            UISpecEntry('s', {'component': 'divider'}, parse_specification({'component': 'divider'}), 'm'),
            ErrorEntry('the model provider request failed', 'provider_error'),
        ],
        loading=True,
    )

    html = str(render_conversation(conversation))

    assert html.startswith('<div class="genui-conversation"><div class="genui-message genui-user">&lt;b&gt;')
    assert '<div class="genui-message genui-assistant">Here you go</div><div class="genui-weather">' in html
    assert '<hr class="genui-divider">' in html
    assert (
        '<div class="genui-error" data-code="provider_error"><strong>Error</strong>'
        '<p>the model provider request failed</p></div>'
    ) in html
    assert html.endswith('<div class="genui-loading" aria-busy="true"></div></div>')


def test_conversation_to_messages():
    conversation = Conversation(
        entries=[
            UserEntry('Weather in Paris?'),
            AssistantTextEntry('m1', '', True),
            AssistantTextEntry('m2', 'Here it is.', True),
            ToolCallEntry('c', 'show_weather_card', WEATHER_ARGS, 'm2'),
            UISpecEntry('s', {'component': 'divider'}, parse_specification({'component': 'divider'})),
            ErrorEntry('boom', 'internal_error'),
        ]
    )

    assert conversation.to_messages() == [
        ChatMessage(role=Role.USER, content='Weather in Paris?'),
        ChatMessage(role=Role.ASSISTANT, content='Here it is.'),
        ChatMessage(role=Role.TOOL, content=UI_ARTIFACT_PLACEHOLDER),
        ChatMessage(role=Role.TOOL, content=UI_ARTIFACT_PLACEHOLDER),
    ]
