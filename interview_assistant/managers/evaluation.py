import json
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, TypeVar

import openai
import structlog
from openai import AsyncOpenAI

from ..application.models import Answer, Difficulty, Question, TIME_LIMITS
from ..core.config import Settings, get_settings
from ..core.exceptions import AuthError, ServiceError
from ..core.interfaces import CompletionService, InterviewEvaluator

logger = structlog.get_logger(__name__)

T = TypeVar("T")

QUESTION_COUNT = 6
QUESTIONS_PER_DIFFICULTY = 2
DEFAULT_SCORE = 5
MIN_SCORE = 1
MAX_SCORE = 10

QUESTIONS_PROMPT = """
Generate 6 interview questions for a Full Stack Developer position (React/Node.js).
Format: 2 Easy, 2 Medium, 2 Hard questions.
Each question should be practical and relevant to full-stack development.

Return as JSON array with this structure:
[
  {
    "id": "q1",
    "text": "Question text here",
    "difficulty": "easy|medium|hard",
    "timeLimit": 20|60|120,
    "category": "React|Node.js|Database|System Design|General"
  }
]
"""

EVALUATION_PROMPT = """
Evaluate this interview answer for a Full Stack Developer position.

Question: {question}
Difficulty: {difficulty}
Answer: {answer}

Rate the answer on a scale of 1-10 considering:
- Technical accuracy
- Completeness
- Relevance to the question
- Practical understanding

Return only the numeric score (1-10).
"""

SUMMARY_PROMPT = """
Based on these interview responses, provide a brief summary of the candidate's performance.

Interview Responses:
{responses}

Provide a concise 2-3 sentence summary highlighting strengths and areas for improvement.
"""

FALLBACK_QUESTIONS = [
    Question(
        id="q1",
        text="What is React and what are its main advantages?",
        difficulty=Difficulty.EASY,
        time_limit=TIME_LIMITS[Difficulty.EASY],
        category="React",
    ),
    Question(
        id="q2",
        text="Explain the difference between let, const, and var in JavaScript.",
        difficulty=Difficulty.EASY,
        time_limit=TIME_LIMITS[Difficulty.EASY],
        category="General",
    ),
    Question(
        id="q3",
        text="How would you handle state management in a large React application?",
        difficulty=Difficulty.MEDIUM,
        time_limit=TIME_LIMITS[Difficulty.MEDIUM],
        category="React",
    ),
    Question(
        id="q4",
        text="Describe the difference between SQL and NoSQL databases. When would you use each?",
        difficulty=Difficulty.MEDIUM,
        time_limit=TIME_LIMITS[Difficulty.MEDIUM],
        category="Database",
    ),
    Question(
        id="q5",
        text="How would you design a scalable microservices architecture for an e-commerce platform?",
        difficulty=Difficulty.HARD,
        time_limit=TIME_LIMITS[Difficulty.HARD],
        category="System Design",
    ),
    Question(
        id="q6",
        text="Explain how you would implement authentication and authorization in a Node.js API.",
        difficulty=Difficulty.HARD,
        time_limit=TIME_LIMITS[Difficulty.HARD],
        category="Node.js",
    ),
]

CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class EvaluationResult(Generic[T]):
    """Either the service's parsed value or a locally computed default."""
    value: T
    fallback: bool = False
    error: Optional[str] = None

    @classmethod
    def from_service(cls, value: T) -> "EvaluationResult[T]":
        return cls(value=value)

    @classmethod
    def from_fallback(cls, value: T, error: Any = None) -> "EvaluationResult[T]":
        return cls(value=value, fallback=True, error=str(error) if error is not None else None)


class OpenAICompletionService(CompletionService):
    """Stateless single-prompt chat completion, no retries."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.OPENAI_API_KEY,
                base_url=self.settings.OPENAI_BASE_URL,
                timeout=self.settings.AI_TIMEOUT_SECONDS,
                max_retries=0,
            )
        return self._client

    async def complete(self, prompt: str) -> str:
        if not self.settings.has_api_key:
            raise AuthError("OpenAI API key not configured. Please add your API key to the .env file.")

        try:
            response = await self.client.chat.completions.create(
                model=self.settings.AI_MODEL,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.settings.AI_MAX_TOKENS,
                temperature=self.settings.AI_TEMPERATURE,
            )
        except openai.AuthenticationError as e:
            logger.error("completion_auth_failed", status=e.status_code)
            raise AuthError(f"OpenAI rejected the API key ({e.status_code})") from e
        except openai.APIStatusError as e:
            body = e.response.text if e.response is not None else e.body
            logger.error("completion_failed", status=e.status_code, body=body)
            raise ServiceError(
                f"OpenAI API error ({e.status_code}): {e.message}",
                http_status=e.status_code,
                body=body,
            ) from e
        except openai.APIError as e:
            logger.error("completion_unreachable", error=str(e))
            raise ServiceError(f"OpenAI API unreachable: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices and choices[0].message else None
        if content is None:
            raise ServiceError(
                "Invalid response from OpenAI API",
                http_status=200,
                body=response.model_dump() if hasattr(response, "model_dump") else response,
            )
        return content


def strip_code_fence(text: str) -> str:
    return CODE_FENCE.sub("", text.strip())


def parse_questions(payload: str) -> List[Question]:
    """
    Turn the model's JSON reply into canonical questions.

    Ids are renumbered, time limits come from the difficulty band and the
    category defaults to "General". Raises ValueError unless the reply holds
    exactly two questions of each difficulty.
    """
    items = json.loads(strip_code_fence(payload))
    if not isinstance(items, list) or len(items) != QUESTION_COUNT:
        raise ValueError(f"expected a list of {QUESTION_COUNT} questions")

    questions = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not str(item.get("text") or "").strip():
            raise ValueError(f"question {index + 1} has no text")
        difficulty = Difficulty(str(item.get("difficulty", "")).lower())
        questions.append(Question(
            id=f"q{index + 1}",
            text=str(item["text"]).strip(),
            difficulty=difficulty,
            time_limit=TIME_LIMITS[difficulty],
            category=item.get("category") or "General",
        ))

    counts = Counter(q.difficulty for q in questions)
    if any(counts[d] != QUESTIONS_PER_DIFFICULTY for d in Difficulty):
        raise ValueError(f"unexpected difficulty mix {dict(counts)}")
    return questions


def parse_score(reply: str) -> int:
    match = LEADING_INTEGER.match(reply)
    score = int(match.group(1)) if match else 0
    return max(MIN_SCORE, min(MAX_SCORE, score or DEFAULT_SCORE))


def fallback_summary(scores: Sequence[int]) -> str:
    average = sum(scores) / len(scores) if scores else 0.0
    if average >= 7:
        verdict = "Strong performance with good technical understanding."
    elif average >= 5:
        verdict = "Average performance with room for improvement."
    else:
        verdict = "Below average performance requiring significant development."
    return f"Candidate scored an average of {average:.1f}/10. {verdict}"


def score_feedback(score: int) -> str:
    if score >= 8:
        return "Excellent answer!"
    if score >= 6:
        return "Good answer with room for improvement."
    if score >= 4:
        return "Fair answer, consider providing more detail."
    return "Try to be more specific and detailed in your response."


class OpenAIInterviewManager(InterviewEvaluator):
    def __init__(self, completion: Optional[CompletionService] = None):
        self.completion = completion or OpenAICompletionService()

    async def generate_questions(self, strict: bool = False) -> EvaluationResult[List[Question]]:
        """Generate the interview questions, falling back to the built-in set.

        With ``strict`` set, auth and service errors propagate so the caller
        can abort starting the interview; malformed replies still fall back.
        """
        try:
            reply = await self.completion.complete(QUESTIONS_PROMPT)
        except (AuthError, ServiceError) as e:
            if strict:
                raise
            logger.warning("question_generation_fallback", error=str(e))
            return EvaluationResult.from_fallback(list(FALLBACK_QUESTIONS), e)

        try:
            return EvaluationResult.from_service(parse_questions(reply))
        except (ValueError, TypeError, KeyError) as e:
            logger.warning("question_parse_fallback", error=str(e))
            return EvaluationResult.from_fallback(list(FALLBACK_QUESTIONS), e)

    async def evaluate_answer(self, question: Question, answer: str) -> EvaluationResult[int]:
        prompt = EVALUATION_PROMPT.format(
            question=question.text,
            difficulty=question.difficulty.value,
            answer=answer,
        )
        try:
            reply = await self.completion.complete(prompt)
        except (AuthError, ServiceError) as e:
            logger.warning("answer_scoring_fallback", question_id=question.id, error=str(e))
            return EvaluationResult.from_fallback(DEFAULT_SCORE, e)

        score = parse_score(reply)
        logger.debug("answer_scored", question_id=question.id, score=score)
        return EvaluationResult.from_service(score)

    async def generate_final_summary(self, answers: List[Answer]) -> EvaluationResult[str]:
        responses = "\n\n".join(
            f"{i + 1}. Q: {a.question}\n   A: {a.answer}\n   Score: {a.score}/10"
            for i, a in enumerate(answers)
        )
        try:
            reply = await self.completion.complete(SUMMARY_PROMPT.format(responses=responses))
        except (AuthError, ServiceError) as e:
            logger.warning("summary_fallback", error=str(e))
            return EvaluationResult.from_fallback(fallback_summary([a.score for a in answers]), e)

        summary = reply.strip()
        if not summary:
            return EvaluationResult.from_fallback(
                fallback_summary([a.score for a in answers]), "empty summary"
            )
        return EvaluationResult.from_service(summary)
