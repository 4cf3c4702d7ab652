import pytest
from langchain_core.messages import AIMessage

from saver_backend.api.dependencies import get_completion_client
from saver_backend.api.prompt_utilities import CompletionClient, build_messages, format_conversation, to_data_url
from saver_backend.relay.errors import UpstreamError
from conftest import login

PROVIDER_ERROR = "Incorrect API key provided: sk-live-abc123 (org-4411)"


class ScriptedModel:
    """Chat model double for `CompletionClient(model=...)`."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.messages = None

    def invoke(self, messages):
        self.messages = messages
        if self.error is not None:
            raise self.error
        return self.reply


def test_complete_returns_model_text_and_sends_the_image():
    model = ScriptedModel(reply=AIMessage(content="Order a troponin."))

    answer = CompletionClient(model=model).complete("Chest pain?", image="aGk=")

    assert answer == "Order a troponin."
    system, human = model.messages
    assert "Think like a doctor" in system.content
    assert human.content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,aGk="}}


def test_provider_failure_is_reported_without_its_message(caplog):
    client = CompletionClient(model=ScriptedModel(error=RuntimeError(PROVIDER_ERROR)))

    with caplog.at_level("ERROR", logger="uvicorn"):
        with pytest.raises(UpstreamError) as exc_info:
            client.complete("Dose of heparin?")

    assert exc_info.value.detail == "Completion request failed"
    assert PROVIDER_ERROR in caplog.text


def test_provider_failure_detail_over_http(app, client, make_account):
    app.dependency_overrides[get_completion_client] = lambda: CompletionClient(
        model=ScriptedModel(error=RuntimeError(PROVIDER_ERROR))
    )
    make_account()
    login(client, "clinician@saver.test")

    response = client.post("/medical-ai-chat", json={"prompt": "Dose of heparin?"})

    assert response.status_code == 502
    assert response.json() == {"detail": "Completion request failed"}


def test_empty_model_reply_is_an_upstream_error():
    with pytest.raises(UpstreamError):
        CompletionClient(model=ScriptedModel(reply=AIMessage(content="  "))).complete("Hi")


def test_to_data_url_normalizes_mime():
    assert to_data_url("data:image/jpg;base64,AAAA") == "data:image/jpeg;base64,AAAA"
    assert to_data_url(" AAAA ", mime="application/pdf") == "data:image/png;base64,AAAA"


def test_format_conversation():
    assert format_conversation([], "First question") == "First question"

    prompt = format_conversation(
        [{"role": "user", "content": "Fever 39C"}, {"role": "assistant", "content": "Check for sepsis."}],
        "Lactate is 3.1",
    )

    assert prompt == (
        "Conversation so far:\nClinician: Fever 39C\n\nAssistant: Check for sepsis."
        "\n\nNew message:\nLactate is 3.1"
    )


def test_build_messages_without_image():
    _, human = build_messages("Plain question")

    assert human.content == [{"type": "text", "text": "Plain question"}]
