import pytest
import requests

from pupil_anonymiser.llm.base import LLMConfig, LLMMessage
from pupil_anonymiser.llm.clients.openai import OpenAIClient
from pupil_anonymiser.llm.factory import create_llm_client
from pupil_anonymiser.llm.prompts import build_report_messages, tone_instruction, TONE_INSTRUCTIONS
from pupil_anonymiser.reports.template import (
    ReportSection,
    load_report_template,
    parse_section_arg,
    save_report_template,
    sections_from_dicts,
)


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.posts = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append({"url": url, "json": json, "headers": headers})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)


def _reply(text):
    return {"choices": [{"message": {"content": text}}]}


def _cfg(**kw):
    return LLMConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test", retry_delay=0, **kw)


def test_openai_client_payload():
    session = FakeSession([_reply('  {"English": "ok"}  ')])
    client = OpenAIClient(_cfg(base_url="https://example.test/v1/"), session=session)

    resp = client.chat(
        [LLMMessage("user", "hello")],
        temperature=0.4,
        max_tokens=100,
        response_format="json",
    )

    assert resp.content == '{"English": "ok"}'
    post = session.posts[0]
    assert post["url"] == "https://example.test/v1/chat/completions"
    assert post["headers"]["Authorization"] == "Bearer sk-test"
    assert post["json"]["response_format"] == {"type": "json_object"}
    assert post["json"]["max_tokens"] == 100
    assert post["json"]["messages"] == [{"role": "user", "content": "hello"}]


def test_openai_client_retries():
    session = FakeSession([requests.ConnectionError("down"), _reply("fine")])
    client = OpenAIClient(_cfg(max_retries=3), session=session)

    assert client.chat([LLMMessage("user", "hi")]).content == "fine"
    assert len(session.posts) == 2


def test_openai_client_gives_up():
    session = FakeSession([requests.ConnectionError("down"), {"unexpected": True}])
    client = OpenAIClient(_cfg(max_retries=2), session=session)

    with pytest.raises(KeyError):
        client.chat([LLMMessage("user", "hi")])
    assert len(session.posts) == 2


def test_openai_client_requires_key():
    with pytest.raises(ValueError):
        OpenAIClient(LLMConfig(provider="openai", model="gpt-4o-mini"))


def test_factory_reads_key_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    client = create_llm_client("reports", model="gpt-4o")
    assert isinstance(client, OpenAIClient)
    assert client.cfg.api_key == "sk-env"
    assert client.cfg.model == "gpt-4o"


def test_factory_without_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        create_llm_client("reports")


def test_factory_unknown_role():
    with pytest.raises(KeyError):
        create_llm_client("grading")


def test_report_messages():
    sections = [ReportSection("English", 80, include_next_step=True), ReportSection("PE", 40)]
    messages = build_report_messages(
        "Pupil-004",
        {"Name": "Pupil-004", "Reading": "Secure"},
        sections,
        tone="warm",
        style_notes="Mention the class trip",
    )
    system, user = messages
    assert system.role == "system" and "British English" in system.content
    assert "Pupil pseudonym: Pupil-004" in user.content
    assert TONE_INSTRUCTIONS["warm"] in user.content
    assert "Mention the class trip" in user.content
    assert '"Reading": "Secure"' in user.content
    assert 'Section name: "English", word target: 80, include next step: yes' in user.content


@pytest.mark.parametrize("tone", [None, "", "shouty"])
def test_unknown_tone_falls_back_to_balanced(tone):
    assert tone_instruction(tone) == TONE_INSTRUCTIONS["balanced"]


def test_sections_from_dicts():
    sections = sections_from_dicts(
        [
            {"name": "English", "wordTarget": "60", "includeNextStep": True},
            {"name": "", "word_target": "lots"},
        ]
    )
    assert sections[0] == ReportSection("English", 60, True)
    assert sections[0].output_keys() == ["English", "English_next_step"]
    assert sections[1] == ReportSection("Section 2", 100, False)


def test_report_template_round_trip(tmp_path):
    path = tmp_path / "templates" / "y4.json"
    sections = [ReportSection("Science", 70, True)]
    save_report_template(path, sections)
    assert load_report_template(path) == sections


def test_empty_report_template(tmp_path):
    path = tmp_path / "t.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_report_template(path)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("English:80:next", ReportSection("English", 80, True)),
        ("Maths:next:60", ReportSection("Maths", 60, True)),
        ("PE", ReportSection("PE", 100, False)),
        (" Science : 70 ", ReportSection("Science", 70, False)),
    ],
)
def test_parse_section_arg(text, expected):
    assert parse_section_arg(text) == expected


@pytest.mark.parametrize("text", ["", ":80", "English:lots"])
def test_parse_section_arg_rejects(text):
    with pytest.raises(ValueError):
        parse_section_arg(text)
