# tests/test_evaluation.py
import json
from collections import Counter
from types import SimpleNamespace

import httpx
import openai
import pytest

from interview_assistant.application.models import Answer, Difficulty, Question
from interview_assistant.core.config import Settings
from interview_assistant.core.exceptions import AuthError, ServiceError
from interview_assistant.managers.evaluation import (
    FALLBACK_QUESTIONS,
    OpenAICompletionService,
    OpenAIInterviewManager,
    fallback_summary,
    parse_score,
    score_feedback,
)
from tests.conftest import FakeCompletion

QUESTION = Question(id="q1", text="What is a closure?", difficulty=Difficulty.EASY, time_limit=20)

def service_questions(mix=("easy", "easy", "medium", "medium", "hard", "hard")):
    return json.dumps([
        {"id": f"x{i}", "text": f"Question {i}?", "difficulty": d, "timeLimit": 999, "category": None}
        for i, d in enumerate(mix)
    ])

def make_answers(*scores):
    return [
        Answer(question_id=f"q{i}", question=f"Q{i}", difficulty=Difficulty.EASY,
               answer=f"A{i}", score=s, time_spent=5)
        for i, s in enumerate(scores)
    ]

def assert_canonical(questions):
    assert len(questions) == 6
    assert Counter(q.difficulty for q in questions) == {
        Difficulty.EASY: 2, Difficulty.MEDIUM: 2, Difficulty.HARD: 2,
    }
    limits = {Difficulty.EASY: 20, Difficulty.MEDIUM: 60, Difficulty.HARD: 120}
    assert all(q.time_limit == limits[q.difficulty] for q in questions)


# Question generation

@pytest.mark.asyncio
async def test_generate_questions_from_service():
    manager = OpenAIInterviewManager(FakeCompletion(service_questions()))
    result = await manager.generate_questions()

    assert result.fallback is False
    assert_canonical(result.value)
    assert [q.id for q in result.value] == ["q1", "q2", "q3", "q4", "q5", "q6"]
    assert all(q.category == "General" for q in result.value)

@pytest.mark.asyncio
async def test_generate_questions_accepts_code_fence():
    reply = "```json\n" + service_questions() + "\n```"
    result = await OpenAIInterviewManager(FakeCompletion(reply)).generate_questions()
    assert result.fallback is False
    assert_canonical(result.value)

@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [
    "not json at all",
    json.dumps({"questions": []}),
    service_questions(("easy", "easy", "easy", "medium", "hard", "hard")),
    service_questions(("easy", "medium", "hard")),
    service_questions(("easy", "easy", "medium", "medium", "hard", "impossible")),
])
async def test_generate_questions_falls_back_on_bad_reply(reply):
    result = await OpenAIInterviewManager(FakeCompletion(reply)).generate_questions()
    assert result.fallback is True
    assert result.value == FALLBACK_QUESTIONS
    assert_canonical(result.value)

@pytest.mark.asyncio
async def test_generate_questions_falls_back_on_service_error():
    completion = FakeCompletion(ServiceError("boom", http_status=500, body="oops"))
    result = await OpenAIInterviewManager(completion).generate_questions()
    assert result.fallback is True
    assert "boom" in result.error
    assert_canonical(result.value)

@pytest.mark.asyncio
async def test_strict_generation_propagates_auth_error():
    completion = FakeCompletion(AuthError("no key"))
    with pytest.raises(AuthError):
        await OpenAIInterviewManager(completion).generate_questions(strict=True)

@pytest.mark.asyncio
async def test_strict_generation_still_falls_back_on_bad_json():
    result = await OpenAIInterviewManager(FakeCompletion("[]")).generate_questions(strict=True)
    assert result.fallback is True


# Answer scoring

@pytest.mark.parametrize("reply, score", [
    ("8", 8),
    (" 7/10", 7),
    ("10", 10),
    ("42", 10),
    ("-3", 1),
    ("0", 5),
    ("Score: 9", 5),
    ("", 5),
])
def test_parse_score(reply, score):
    assert parse_score(reply) == score

@pytest.mark.asyncio
async def test_evaluate_answer_uses_reply():
    completion = FakeCompletion("9")
    result = await OpenAIInterviewManager(completion).evaluate_answer(QUESTION, "A function with its scope")
    assert result.value == 9
    assert result.fallback is False
    assert "What is a closure?" in completion.prompts[0]
    assert "Difficulty: easy" in completion.prompts[0]

@pytest.mark.asyncio
@pytest.mark.parametrize("error", [AuthError("no key"), ServiceError("down", http_status=503)])
async def test_evaluate_answer_defaults_to_five(error):
    result = await OpenAIInterviewManager(FakeCompletion(error)).evaluate_answer(QUESTION, "anything")
    assert result.value == 5
    assert result.fallback is True


# Summary

def test_fallback_summary_strong_band():
    summary = fallback_summary([9, 8, 10])
    assert "average of 9.0/10" in summary
    assert "Strong performance" in summary

@pytest.mark.parametrize("scores, phrase", [
    ([5, 6], "Average performance"),
    ([1, 4], "Below average"),
    ([], "Below average"),
])
def test_fallback_summary_bands(scores, phrase):
    assert phrase in fallback_summary(scores)

@pytest.mark.asyncio
async def test_summary_from_service():
    completion = FakeCompletion("  Solid candidate.  ")
    result = await OpenAIInterviewManager(completion).generate_final_summary(make_answers(7, 8))
    assert result.value == "Solid candidate."
    assert "Score: 7/10" in completion.prompts[0]

@pytest.mark.asyncio
async def test_summary_fallback_on_error():
    result = await OpenAIInterviewManager(FakeCompletion()).generate_final_summary(make_answers(9, 8, 10))
    assert result.fallback is True
    assert result.value.startswith("Candidate scored an average of 9.0/10.")

def test_score_feedback():
    assert score_feedback(9) == "Excellent answer!"
    assert score_feedback(6).startswith("Good answer")
    assert score_feedback(4).startswith("Fair answer")
    assert score_feedback(1).startswith("Try to be more specific")


# Completion service

class FakeCompletions:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

def fake_client(outcome):
    completions = FakeCompletions(outcome)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions

def status_error(cls, code):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(code, request=request, text='{"error": "nope"}')
    return cls("nope", response=response, body={"error": "nope"})

def configured(**overrides):
    return Settings(_env_file=None, OPENAI_API_KEY="sk-test", **overrides)

@pytest.mark.asyncio
@pytest.mark.parametrize("key", [None, "your_openai_api_key_here"])
async def test_missing_key_is_auth_error(key):
    client, completions = fake_client(None)
    service = OpenAICompletionService(Settings(_env_file=None, OPENAI_API_KEY=key), client=client)
    with pytest.raises(AuthError):
        await service.complete("hi")
    assert completions.calls == []

@pytest.mark.asyncio
async def test_completion_returns_message_content():
    reply = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="7"))])
    client, completions = fake_client(reply)
    service = OpenAICompletionService(configured(AI_MODEL="gpt-test"), client=client)

    assert await service.complete("rate this") == "7"
    call = completions.calls[0]
    assert call["model"] == "gpt-test"
    assert call["messages"] == [{"role": "user", "content": "rate this"}]

@pytest.mark.asyncio
async def test_completion_without_content_is_service_error():
    client, _ = fake_client(SimpleNamespace(choices=[]))
    service = OpenAICompletionService(configured(), client=client)
    with pytest.raises(ServiceError) as excinfo:
        await service.complete("hi")
    assert excinfo.value.http_status == 200

@pytest.mark.asyncio
async def test_http_error_is_service_error():
    client, _ = fake_client(status_error(openai.InternalServerError, 500))
    service = OpenAICompletionService(configured(), client=client)
    with pytest.raises(ServiceError) as excinfo:
        await service.complete("hi")
    assert excinfo.value.http_status == 500
    assert "nope" in excinfo.value.body

@pytest.mark.asyncio
async def test_rejected_key_is_auth_error():
    client, _ = fake_client(status_error(openai.AuthenticationError, 401))
    service = OpenAICompletionService(configured(), client=client)
    with pytest.raises(AuthError):
        await service.complete("hi")
