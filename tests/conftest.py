"""
Shared test fixtures for Code Hub.
The OpenAI-compatible client is replaced with a MagicMock.
Zero network calls — all LLM output comes from canned strings.
"""
import httpx
import openai
import pytest
from unittest.mock import MagicMock


def make_completion(content):
    """Shape a fake chat-completions response around one message."""
    choice = MagicMock()
    choice.message.content = content
    completion = MagicMock()
    completion.choices = [choice]
    return completion


def make_status_error(status_code, body):
    """Build the SDK's APIStatusError as the client would raise it."""
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return openai.APIStatusError(f"Error code: {status_code}", response=response, body=body)


@pytest.fixture
def fake_llm():
    """Factory for a fake client returning `content` or raising `error`."""
    def _factory(content=None, error=None):
        client = MagicMock()
        if error is not None:
            client.chat.completions.create.side_effect = error
        else:
            client.chat.completions.create.return_value = make_completion(content)
        return client
    return _factory


@pytest.fixture
def stub_llm(monkeypatch, fake_llm):
    """Install a fake client behind request_builder.get_client.
    The API-key precondition is kept so route tests still exercise it."""
    import codehub.services.request_builder as rb
    from codehub.errors import MissingInputError

    def _install(content=None, error=None):
        client = fake_llm(content, error)

        def _get_client(api_key):
            if not api_key:
                raise MissingInputError("Please enter your OpenRouter API key")
            return client

        monkeypatch.setattr(rb, "get_client", _get_client)
        return client
    return _install


@pytest.fixture
def test_config(monkeypatch):
    """Configured credential and default model, restored after each test."""
    from codehub.config import config
    monkeypatch.setattr(config, "api_key", "sk-or-test-0123456789")
    monkeypatch.setattr(config, "default_model", "anthropic/claude-3-opus:beta")
    return config


@pytest.fixture
def client(test_config):
    """Flask test client with a configured API key."""
    from codehub.app import app
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def sample_state():
    """A filled-in multiple-choice question, as the browser would post it."""
    return {
        "questionNumber": 3,
        "teksStandard": "A.2C — writing equations",
        "questionText": "Which equation has slope 2 and y-intercept 1?",
        "questionType": "multiple-choice",
        "numberOfOptions": 4,
        "options": {"A": "y = x + 2", "B": "y = 2x + 1", "C": "y = 2x - 1", "D": "y = x - 2"},
        "correctAnswer": "B",
        "explanation": "The slope is the coefficient of x and the intercept is the constant.",
        "misconceptions": [
            "Swapped slope and intercept.",
            "Used the opposite sign for the intercept.",
            "Subtracted instead of adding.",
        ],
        "includeExtraCredit": True,
    }


@pytest.fixture
def status_error():
    """Factory for provider failures: status_error(401, {"message": ...})."""
    return make_status_error
