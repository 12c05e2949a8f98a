import json
import threading

from tutor import TutorClient, TutorRequest, knowledge_hints, knowledge_name, preset_answer
from tutor.presets import GENERIC_ANSWER, GENERIC_HINTS, PRESET_ANSWERS


def test_keyword_match_selects_answer():
    answer = preset_answer("chemical-equilibrium", "What is the equilibrium Constant?")
    assert "temperature" in answer
    assert preset_answer("atom-structure", "什么是质子") == PRESET_ANSWERS["atom-structure"][1][1][1]


def test_topic_default_and_generic_fallback():
    default = PRESET_ANSWERS["ionic-bond"][0]
    assert preset_answer("ionic-bond", "tell me more") == default
    assert preset_answer("vsepr", "why is water bent?") == GENERIC_ANSWER


def test_hints_with_generic_fallback():
    assert len(knowledge_hints("galvanic-cell")) == 4
    assert knowledge_hints("alkene") == GENERIC_HINTS


def test_knowledge_name_fallback():
    assert knowledge_name("titration") == "Acid-base titration"
    assert knowledge_name("unknown") == "Chemistry"


def test_missing_api_key_uses_preset(monkeypatch):
    monkeypatch.delenv("CHEMLAB_API_KEY", raising=False)
    client = TutorClient()
    resp = client.ask(TutorRequest("How do ionic bonds form?", "ionic-bond"))
    assert resp.is_preset
    assert resp.answer == PRESET_ANSWERS["ionic-bond"][1][0][1]


def test_unreachable_upstream_falls_back():
    client = TutorClient(api_key="test-key", url="http://127.0.0.1:9/v1/chat/completions", timeout=0.5)
    resp = client.ask(TutorRequest("Which electrode is negative?", "galvanic-cell"))
    assert resp.is_preset
    assert resp.knowledge_id == "galvanic-cell"
    assert "Negative electrode" in resp.answer


def test_malformed_response_falls_back(monkeypatch):
    client = TutorClient(api_key="test-key")
    monkeypatch.setattr(client, "_post", lambda payload: {"choices": []})
    resp = client.ask(TutorRequest("anything", "covalent-bond"))
    assert resp.is_preset


def test_successful_answer(monkeypatch):
    client = TutorClient(api_key="test-key")
    seen = {}

    def fake_post(payload):
        seen.update(payload)
        return {"choices": [{"message": {"content": "Because of lone pairs."}}]}

    monkeypatch.setattr(client, "_post", fake_post)
    resp = client.ask(TutorRequest("Why is water bent?", "vsepr", {"shape": "bent"}))
    assert not resp.is_preset
    assert resp.answer == "Because of lone pairs."
    assert seen["model"] == "qwen-turbo"
    assert seen["max_tokens"] == 800
    assert seen["messages"][1] == {"role": "user", "content": "Why is water bent?"}
    assert json.dumps({"shape": "bent"}) in seen["messages"][0]["content"]


def test_environment_configuration(monkeypatch):
    monkeypatch.setenv("CHEMLAB_API_KEY", "env-key")
    monkeypatch.setenv("CHEMLAB_TUTOR_URL", "http://localhost:1/chat")
    client = TutorClient()
    assert client.api_key == "env-key"
    assert client.url == "http://localhost:1/chat"


def test_background_request_reports_through_callback(monkeypatch):
    monkeypatch.delenv("CHEMLAB_API_KEY", raising=False)
    done = threading.Event()
    result = {}

    def callback(resp):
        result["resp"] = resp
        done.set()

    TutorClient().ask_in_background(TutorRequest("hello", "titration"), callback)
    assert done.wait(2.0)
    assert result["resp"].is_preset
