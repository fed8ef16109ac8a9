import json

from typing import Any
from unittest import mock

import pytest

from sse_starlette.sse import AppStatus
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from a2a_runtime.server.agent_execution import CallableTaskHandler
from a2a_runtime.server.apps import A2AStarletteApplication
from a2a_runtime.server.request_handlers import (
    DefaultTaskManager,
    TaskManager,
)
from a2a_runtime.types import (
    AgentCapabilities,
    AgentCard,
    Artifact,
    DataPart,
    InternalError,
    InvalidRequestError,
    JSONParseError,
    Message,
    MethodNotFoundError,
    Part,
    PushNotificationConfig,
    Task,
    TaskArtifactUpdateEvent,
    TaskNotCancelableError,
    TaskNotFoundError,
    TaskPushNotificationConfig,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
    TextPart,
    UnsupportedOperationError,
)
from a2a_runtime.utils import get_message_text
from a2a_runtime.utils.errors import MethodNotImplementedError, ServerError


# === TEST SETUP ===

MINIMAL_AGENT_SKILL: dict[str, Any] = {
    'id': 'skill-123',
    'name': 'Recipe Finder',
    'description': 'Finds recipes',
    'tags': ['cooking'],
}

MINIMAL_AGENT_AUTH: dict[str, Any] = {'schemes': ['Bearer']}

AGENT_CAPS = AgentCapabilities(
    pushNotifications=True, stateTransitionHistory=False, streaming=True
)

MINIMAL_AGENT_CARD: dict[str, Any] = {
    'authentication': MINIMAL_AGENT_AUTH,
    'capabilities': AGENT_CAPS,
    'defaultInputModes': ['text/plain'],
    'defaultOutputModes': ['application/json'],
    'description': 'Test Agent',
    'name': 'TestAgent',
    'skills': [MINIMAL_AGENT_SKILL],
    'url': 'http://example.com/agent',
    'version': '1.0',
}

TEXT_PART_DATA: dict[str, Any] = {'type': 'text', 'text': 'Hello'}

DATA_PART_DATA: dict[str, Any] = {'type': 'data', 'data': {'key': 'value'}}

MINIMAL_MESSAGE_USER: dict[str, Any] = {
    'role': 'user',
    'parts': [TEXT_PART_DATA],
}

MINIMAL_TASK_STATUS: dict[str, Any] = {'state': 'submitted'}


def _rpc(method: str, params: Any, request_id: Any = '123') -> dict:
    return {
        'jsonrpc': '2.0',
        'id': request_id,
        'method': method,
        'params': params,
    }


def _sse_payloads(response) -> list[dict[str, Any]]:
    return [
        json.loads(line[len('data:') :])
        for line in response.iter_lines()
        if line.startswith('data:')
    ]


@pytest.fixture(autouse=True)
def reset_sse_app_status(monkeypatch: pytest.MonkeyPatch):
    """Each TestClient runs its own event loop."""
    monkeypatch.setattr(AppStatus, 'should_exit_event', None, raising=False)


@pytest.fixture
def agent_card():
    return AgentCard(**MINIMAL_AGENT_CARD)


@pytest.fixture
def task_manager():
    return mock.AsyncMock(spec=TaskManager)


@pytest.fixture
def app(agent_card: AgentCard, task_manager: mock.AsyncMock):
    return A2AStarletteApplication(agent_card, task_manager)


@pytest.fixture
def client(app: A2AStarletteApplication):
    """Create a test client with the app."""
    return TestClient(app.build())


# === BASIC FUNCTIONALITY TESTS ===


def test_agent_card_endpoint(client: TestClient, agent_card: AgentCard):
    """Test the agent card endpoint returns expected data."""
    response = client.get('/.well-known/agent.json')
    assert response.status_code == 200
    data = response.json()
    assert data['name'] == agent_card.name
    assert data['version'] == agent_card.version
    assert data['capabilities']['streaming'] is True
    assert data['skills'][0]['id'] == 'skill-123'


def test_agent_card_custom_url(
    app: A2AStarletteApplication, agent_card: AgentCard
):
    """Test the agent card endpoint with a custom URL."""
    client = TestClient(app.build(agent_card_url='/my-agent'))
    response = client.get('/my-agent')
    assert response.status_code == 200
    assert response.json()['name'] == agent_card.name


def test_rpc_endpoint_custom_url(
    app: A2AStarletteApplication, task_manager: mock.AsyncMock
):
    """Test the RPC endpoint with a custom URL."""
    task_manager.on_get_task.return_value = Task(
        id='task1', status=TaskStatus(**MINIMAL_TASK_STATUS)
    )

    client = TestClient(app.build(rpc_url='/api/rpc'))
    response = client.post('/api/rpc', json=_rpc('tasks/get', {'id': 'task1'}))

    assert response.status_code == 200
    assert response.json()['result']['id'] == 'task1'


def test_build_with_extra_routes(
    app: A2AStarletteApplication, agent_card: AgentCard
):
    """Test building the app with additional routes."""

    def custom_handler(request):
        return JSONResponse({'message': 'Hello'})

    extra_route = Route('/hello', custom_handler, methods=['GET'])
    client = TestClient(app.build(routes=[extra_route]))

    response = client.get('/hello')
    assert response.status_code == 200
    assert response.json() == {'message': 'Hello'}

    response = client.get('/.well-known/agent.json')
    assert response.status_code == 200
    assert response.json()['name'] == agent_card.name


# === REQUEST METHODS TESTS ===


def test_send_task(client: TestClient, task_manager: mock.AsyncMock):
    """Test sending a message."""
    task_manager.on_send_task.return_value = Task(
        id='task1',
        sessionId='session-xyz',
        status=TaskStatus(state=TaskState.completed),
    )

    response = client.post(
        '/',
        json=_rpc(
            'tasks/send',
            {
                'id': 'task1',
                'sessionId': 'session-xyz',
                'message': MINIMAL_MESSAGE_USER,
            },
        ),
    )

    assert response.status_code == 200
    data = response.json()
    assert data['id'] == '123'
    assert data['result']['id'] == 'task1'
    assert data['result']['status']['state'] == 'completed'
    assert 'error' not in data

    task_manager.on_send_task.assert_awaited_once()
    params = task_manager.on_send_task.await_args.args[0]
    assert params.id == 'task1'
    assert params.message.parts[0].root.text == 'Hello'


def test_cancel_task(client: TestClient, task_manager: mock.AsyncMock):
    """Test cancelling a task."""
    task_manager.on_cancel_task.side_effect = ServerError(
        TaskNotCancelableError()
    )

    response = client.post('/', json=_rpc('tasks/cancel', {'id': 'task1'}))

    assert response.status_code == 200
    data = response.json()
    assert data['error']['code'] == TaskNotCancelableError().code
    assert 'result' not in data


def test_get_task(client: TestClient, task_manager: mock.AsyncMock):
    """Test getting a task."""
    task_manager.on_get_task.return_value = Task(
        id='task1', status=TaskStatus(**MINIMAL_TASK_STATUS)
    )

    response = client.post(
        '/', json=_rpc('tasks/get', {'id': 'task1', 'historyLength': 2}, 7)
    )

    assert response.status_code == 200
    data = response.json()
    assert data['id'] == 7
    assert data['result']['id'] == 'task1'
    params = task_manager.on_get_task.await_args.args[0]
    assert params.historyLength == 2


def test_get_task_not_found(client: TestClient, task_manager: mock.AsyncMock):
    task_manager.on_get_task.side_effect = ServerError(TaskNotFoundError())

    response = client.post('/', json=_rpc('tasks/get', {'id': 'missing'}))

    data = response.json()
    assert data['error']['code'] == TaskNotFoundError().code
    assert data['id'] == '123'


def test_set_push_notification(
    client: TestClient, task_manager: mock.AsyncMock
):
    """Test setting push notification configuration."""
    config = TaskPushNotificationConfig(
        id='task1',
        pushNotificationConfig=PushNotificationConfig(
            url='https://example.com', token='secret-token'
        ),
    )
    task_manager.on_set_task_push_notification.return_value = config

    response = client.post(
        '/',
        json=_rpc(
            'tasks/pushNotification/set',
            {
                'id': 'task1',
                'pushNotificationConfig': {
                    'url': 'https://example.com',
                    'token': 'secret-token',
                },
            },
        ),
    )

    assert response.status_code == 200
    data = response.json()
    assert data['result']['pushNotificationConfig']['token'] == 'secret-token'
    task_manager.on_set_task_push_notification.assert_awaited_once()


def test_get_push_notification(
    client: TestClient, task_manager: mock.AsyncMock
):
    """Test getting push notification configuration."""
    task_manager.on_get_task_push_notification.return_value = (
        TaskPushNotificationConfig(
            id='task1',
            pushNotificationConfig=PushNotificationConfig(
                url='https://example.com', token='secret-token'
            ),
        )
    )

    response = client.post(
        '/', json=_rpc('tasks/pushNotification/get', {'id': 'task1'})
    )

    assert response.status_code == 200
    data = response.json()
    assert data['result']['pushNotificationConfig']['url'] == (
        'https://example.com'
    )


def test_push_notification_not_supported(
    agent_card: AgentCard, task_manager: mock.AsyncMock
):
    agent_card.capabilities = AgentCapabilities(pushNotifications=False)
    client = TestClient(
        A2AStarletteApplication(agent_card, task_manager).build()
    )

    response = client.post(
        '/',
        json=_rpc(
            'tasks/pushNotification/set',
            {
                'id': 'task1',
                'pushNotificationConfig': {'url': 'https://example.com'},
            },
        ),
    )

    data = response.json()
    assert data['error']['code'] == -32003
    task_manager.on_set_task_push_notification.assert_not_awaited()


def test_send_task_subscribe(
    app: A2AStarletteApplication, task_manager: mock.AsyncMock
):
    """Test streaming task updates over SSE."""

    async def stream_generator():
        for i in range(3):
            artifact = Artifact(
                name=f'artifact-{i}',
                parts=[
                    Part(root=TextPart(**TEXT_PART_DATA)),
                    Part(root=DataPart(**DATA_PART_DATA)),
                ],
                index=i,
            )
            yield TaskArtifactUpdateEvent(id='task1', artifact=artifact)
        yield TaskStatusUpdateEvent(
            id='task1',
            status=TaskStatus(state=TaskState.completed),
            final=True,
        )

    task_manager.on_send_task_subscribe.return_value = stream_generator()
    client = TestClient(app.build(), raise_server_exceptions=False)

    with client.stream(
        'POST',
        '/',
        json=_rpc(
            'tasks/sendSubscribe',
            {'id': 'task1', 'message': MINIMAL_MESSAGE_USER},
        ),
    ) as response:
        assert response.status_code == 200
        assert response.headers['content-type'].startswith(
            'text/event-stream'
        )
        payloads = _sse_payloads(response)

    assert len(payloads) == 4
    assert all(p['id'] == '123' for p in payloads)
    assert [p['result']['artifact']['name'] for p in payloads[:3]] == [
        'artifact-0',
        'artifact-1',
        'artifact-2',
    ]
    assert payloads[3]['result']['final'] is True


def test_task_resubscription_error_event(
    app: A2AStarletteApplication, task_manager: mock.AsyncMock
):
    """Errors during a stream arrive as a JSON-RPC error event."""

    async def stream_generator():
        yield TaskNotFoundError()

    task_manager.on_resubscribe_to_task.return_value = stream_generator()
    client = TestClient(app.build(), raise_server_exceptions=False)

    with client.stream(
        'POST', '/', json=_rpc('tasks/resubscribe', {'id': 'task1'})
    ) as response:
        payloads = _sse_payloads(response)

    assert len(payloads) == 1
    assert payloads[0]['error']['code'] == TaskNotFoundError().code


def test_streaming_not_supported_returns_json_error(
    agent_card: AgentCard, task_manager: mock.AsyncMock
):
    agent_card.capabilities = AgentCapabilities(streaming=False)
    client = TestClient(
        A2AStarletteApplication(agent_card, task_manager).build()
    )

    response = client.post(
        '/',
        json=_rpc(
            'tasks/sendSubscribe',
            {'id': 'task1', 'message': MINIMAL_MESSAGE_USER},
        ),
    )

    assert response.headers['content-type'].startswith('application/json')
    assert response.json()['error']['code'] == UnsupportedOperationError().code
    task_manager.on_send_task_subscribe.assert_not_called()


# === ERROR HANDLING TESTS ===


def test_invalid_json(client: TestClient):
    """Test handling invalid JSON."""
    response = client.post('/', content='This is not JSON')
    assert response.status_code == 200  # JSON-RPC errors still return 200
    data = response.json()
    assert data['error']['code'] == JSONParseError().code
    assert data.get('id') is None


def test_invalid_request_structure(client: TestClient):
    """Test handling an invalid request structure."""
    response = client.post('/', json={'id': '123'})
    assert response.status_code == 200
    data = response.json()
    assert data['error']['code'] == InvalidRequestError().code
    assert data['id'] == '123'


def test_method_not_implemented(
    client: TestClient, task_manager: mock.AsyncMock
):
    """Test handling MethodNotImplementedError."""
    task_manager.on_get_task.side_effect = MethodNotImplementedError()

    response = client.post('/', json=_rpc('tasks/get', {'id': 'task1'}))

    assert response.status_code == 200
    assert response.json()['error']['code'] == UnsupportedOperationError().code


def test_unknown_method(client: TestClient):
    """Test handling unknown method."""
    response = client.post('/', json=_rpc('unknown/method', {}))
    assert response.status_code == 200
    data = response.json()
    assert data['error']['code'] == MethodNotFoundError().code
    assert data['id'] == '123'


def test_validation_error(client: TestClient):
    """Test handling validation error."""
    response = client.post(
        '/',
        json=_rpc('tasks/send', {'id': 'task1', 'message': {'text': 'Hello'}}),
    )
    assert response.status_code == 200
    data = response.json()
    assert data['error']['code'] == InvalidRequestError().code
    assert data['error']['data']


def test_unhandled_exception(client: TestClient, task_manager: mock.AsyncMock):
    """Test handling unhandled exception."""
    task_manager.on_get_task.side_effect = Exception('Unexpected error')

    response = client.post('/', json=_rpc('tasks/get', {'id': 'task1'}))

    assert response.status_code == 200
    data = response.json()
    assert data['error']['code'] == InternalError().code
    assert 'Unexpected error' in data['error']['message']


def test_get_method_to_rpc_endpoint(client: TestClient):
    """Test sending GET request to RPC endpoint."""
    response = client.get('/')
    assert response.status_code == 405


def test_non_dict_json(client: TestClient):
    """Test handling JSON that's not a dict."""
    response = client.post('/', json=['not', 'a', 'dict'])
    assert response.status_code == 200
    assert response.json()['error']['code'] == InvalidRequestError().code


def test_missing_jsonrpc_member(
    client: TestClient, task_manager: mock.AsyncMock
):
    """Test a request without the jsonrpc member is rejected."""
    request = _rpc('tasks/get', {'id': 'task1'})
    del request['jsonrpc']

    response = client.post('/', json=request)

    assert response.status_code == 200
    data = response.json()
    assert data['id'] == '123'
    assert data['error']['code'] == InvalidRequestError().code
    task_manager.on_get_task.assert_not_called()


# === END TO END ===


async def echo(message: Message) -> str:
    return f'echo: {get_message_text(message)}'


@pytest.fixture
def echo_app(agent_card: AgentCard) -> A2AStarletteApplication:
    return A2AStarletteApplication(
        agent_card, DefaultTaskManager(CallableTaskHandler(echo))
    )


def test_send_and_get_end_to_end(echo_app: A2AStarletteApplication):
    with TestClient(echo_app.build()) as client:
        response = client.post(
            '/',
            json=_rpc(
                'tasks/send',
                {
                    'id': 'task-123',
                    'sessionId': 'sess-1',
                    'message': {
                        'role': 'user',
                        'parts': [{'type': 'text', 'text': 'hi'}],
                    },
                    'historyLength': 10,
                },
            ),
        )
        result = response.json()['result']
        assert result['id'] == 'task-123'
        assert result['sessionId'] == 'sess-1'
        assert result['status']['state'] == 'completed'
        assert len(result['history']) == 1
        assert result['artifacts'][0]['parts'][0]['text'] == 'echo: hi'

        response = client.post('/', json=_rpc('tasks/get', {'id': 'task-123'}))
        assert response.json()['result']['status']['state'] == 'completed'

        response = client.post(
            '/', json=_rpc('tasks/cancel', {'id': 'task-123'})
        )
        assert response.json()['error']['code'] == (
            TaskNotCancelableError().code
        )

        response = client.post('/', json=_rpc('tasks/get', {'id': 'nope'}))
        assert response.json()['error']['code'] == TaskNotFoundError().code


def test_push_config_end_to_end(echo_app: A2AStarletteApplication):
    with TestClient(echo_app.build()) as client:
        client.post(
            '/',
            json=_rpc(
                'tasks/send',
                {'id': 'task-123', 'message': MINIMAL_MESSAGE_USER},
            ),
        )

        response = client.post(
            '/', json=_rpc('tasks/pushNotification/get', {'id': 'task-123'})
        )
        assert response.json()['error']['code'] == InternalError().code

        config = {'url': 'https://example.com/hook', 'token': 'abc'}
        response = client.post(
            '/',
            json=_rpc(
                'tasks/pushNotification/set',
                {'id': 'task-123', 'pushNotificationConfig': config},
            ),
        )
        assert response.json()['result']['pushNotificationConfig'] == config

        response = client.post(
            '/', json=_rpc('tasks/pushNotification/get', {'id': 'task-123'})
        )
        assert response.json()['result']['pushNotificationConfig'] == config


def test_send_subscribe_end_to_end(echo_app: A2AStarletteApplication):
    with TestClient(echo_app.build()) as client:
        with client.stream(
            'POST',
            '/',
            json=_rpc(
                'tasks/sendSubscribe',
                {'id': 'task-123', 'message': MINIMAL_MESSAGE_USER},
            ),
        ) as response:
            payloads = _sse_payloads(response)

        results = [p['result'] for p in payloads]
        assert results[0]['status']['state'] == 'working'
        assert results[0]['final'] is False
        assert results[1]['artifact']['parts'][0]['text'] == 'echo: Hello'
        assert results[-1]['status']['state'] == 'completed'
        assert results[-1]['final'] is True

        response = client.post(
            '/',
            json=_rpc('tasks/get', {'id': 'task-123', 'historyLength': 5}),
        )
        task = response.json()['result']
        assert task['status']['state'] == 'completed'
        assert len(task['history']) == 1
