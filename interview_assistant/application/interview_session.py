import asyncio
import math
import uuid
from datetime import datetime
from typing import Callable, List, Optional

import structlog

from ..core.exceptions import (
    AuthError,
    CandidateNotFound,
    InterviewStateError,
    ServiceError,
)
from ..core.interfaces import InterviewEvaluator, StateStore
from ..managers.evaluation import MIN_SCORE, score_feedback
from . import state as reducers
from .models import (
    Answer,
    AppState,
    Candidate,
    InterviewStatus,
    MessageType,
    Question,
    ResumeMeta,
    utcnow,
)
from .timer import InterviewTimer, TimerState

logger = structlog.get_logger(__name__)


def final_score(answers: List[Answer]) -> int:
    """Mean answer score, rounded half up."""
    if not answers:
        return MIN_SCORE
    return math.floor(sum(a.score for a in answers) / len(answers) + 0.5)


class InterviewFlow:
    """
    Drives one interview at a time over the application state.

    State changes happen synchronously between awaits, so the event loop
    gives single-writer semantics. Submitting an answer stops the countdown
    before the scoring call is awaited, which keeps a timer expiry and a
    submission from both advancing the same question. Outcomes of calls
    that were in flight when the state was reset are dropped.
    """

    def __init__(
        self,
        evaluator: InterviewEvaluator,
        store: Optional[StateStore] = None,
        strict_generation: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.evaluator = evaluator
        self.store = store
        self.strict_generation = strict_generation
        self.clock = clock
        self.state = AppState()
        self.timer = InterviewTimer()
        self._generation = 0
        self._starting: Optional[str] = None
        self._save_lock = asyncio.Lock()

    # Queries

    @property
    def is_active(self) -> bool:
        return self.state.interview.is_interview_active and self.state.interview.current_session is not None

    @property
    def current_candidate(self) -> Optional[Candidate]:
        session = self.state.interview.current_session
        return reducers.find_candidate(self.state, session.candidate_id if session else None)

    @property
    def current_question(self) -> Optional[Question]:
        if not self.is_active:
            return None
        questions = self.state.interview.questions
        index = self.state.interview.current_question_index
        return questions[index] if 0 <= index < len(questions) else None

    def get_candidate(self, candidate_id: str) -> Candidate:
        candidate = reducers.find_candidate(self.state, candidate_id)
        if candidate is None:
            raise CandidateNotFound(candidate_id)
        return candidate

    def pending_resume(self) -> Optional[Candidate]:
        """Candidate whose interview was left in progress, if any."""
        for candidate in self.state.candidates.candidates:
            if candidate.interview_status == InterviewStatus.IN_PROGRESS:
                return candidate
        return None

    # Persistence

    async def load(self) -> None:
        if self.store is None:
            return
        stored = await self.store.load()
        if stored is None:
            return
        self.state = stored
        if self.is_active:
            # The countdown cannot have run while nothing was loaded
            self.timer.restore(stored.interview.time_remaining, stored.interview.current_session.paused_time)
            if not stored.interview.is_paused:
                self.state = reducers.pause_interview(self.state, self.timer.paused_at)
            logger.info("session_restored", candidate_id=stored.interview.current_session.candidate_id)

    async def _persist(self) -> None:
        if self.store is None:
            return
        async with self._save_lock:
            await self.store.save(self.state)

    def _post(self, type: MessageType, content: str, is_system_message: bool = False) -> None:
        self.state = reducers.add_interview_message(self.state, type, content, is_system_message)
        session = self.state.interview.current_session
        if session is not None and session.messages:
            self.state = reducers.add_message(self.state, session.messages[-1])

    def _post_question(self) -> None:
        question = self.current_question
        if question is None:
            return
        total = len(self.state.interview.questions)
        index = self.state.interview.current_question_index
        self._post(
            MessageType.ASSISTANT,
            f"Question {index + 1} of {total} ({question.difficulty.value}, {question.time_limit}s): {question.text}",
        )

    # Commands

    async def create_candidate(
        self,
        name: str,
        email: str,
        phone: str,
        resume: Optional[ResumeMeta] = None,
    ) -> Candidate:
        candidate = Candidate(
            id=uuid.uuid4().hex,
            name=name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            resume=resume,
        )
        self.state = reducers.add_candidate(self.state, candidate)
        logger.info("candidate_created", candidate_id=candidate.id)
        await self._persist()
        return candidate

    def select_candidate(self, candidate_id: Optional[str]) -> None:
        if candidate_id is not None:
            self.get_candidate(candidate_id)
        self.state = reducers.select_candidate(self.state, candidate_id)

    async def start_interview(self, candidate_id: str) -> Question:
        """
        Generate questions and open the session for a candidate.

        Auth or service errors from question generation (only raised when
        strict generation is on) abort the start and leave the candidate
        untouched.
        """
        candidate = self.get_candidate(candidate_id)
        if self.is_active or self._starting is not None:
            raise InterviewStateError("Another interview is already in progress")
        if candidate.interview_status != InterviewStatus.NOT_STARTED:
            raise InterviewStateError(f"Interview for candidate {candidate_id} was already started")

        generation = self._generation
        self._starting = candidate_id
        try:
            result = await self.evaluator.generate_questions(strict=self.strict_generation)
        except (AuthError, ServiceError) as e:
            logger.error("interview_start_aborted", candidate_id=candidate_id, error=str(e))
            raise
        finally:
            self._starting = None

        if generation != self._generation:
            raise InterviewStateError("State was reset while the interview was starting")

        questions = result.value
        now = self.clock()
        state = reducers.clear_messages(self.state)
        state = reducers.set_questions(state, questions)
        state = reducers.start_interview(state, candidate_id, now)
        state = reducers.update_candidate(
            state,
            candidate_id,
            interview_status=InterviewStatus.IN_PROGRESS,
            start_time=now,
            current_question_index=0,
        )
        self.state = reducers.set_current_question(state, 0)
        self.timer.start(questions[0].time_limit)
        self._post_question()

        logger.info(
            "interview_started",
            candidate_id=candidate_id,
            questions=len(questions),
            fallback_questions=result.fallback,
        )
        await self._persist()
        return questions[0]

    async def submit_answer(self, text: str, question_id: str) -> Answer:
        """
        Score an answer to the question currently on the clock.

        ``question_id`` names the question the client was answering. An
        answer aimed at a question that has since expired is rejected, so
        it can never be filed under the next one.
        """
        text = text.strip()
        if not text:
            raise InterviewStateError("Answer cannot be empty")
        if not self.is_active or not self.timer.is_running:
            raise InterviewStateError("No question is awaiting an answer")
        question = self.current_question
        if question.id != question_id:
            raise InterviewStateError(
                f"Question {question_id} is no longer open; the current question is {question.id}"
            )

        # Must happen before the first await
        self.timer.stop()

        candidate_id = self.state.interview.current_session.candidate_id
        time_spent = question.time_limit - self.timer.remaining
        generation = self._generation

        self._post(MessageType.USER, text)
        self.state = reducers.set_typing(self.state, True)

        remaining = self.timer.remaining
        try:
            result = await self.evaluator.evaluate_answer(question, text)
        except Exception:
            if generation == self._generation:
                self.state = reducers.set_typing(self.state, False)
                self.timer.start(remaining)
            raise
        if generation != self._generation:
            logger.info("stale_score_dropped", question_id=question.id)
            raise InterviewStateError("State was reset while the answer was being scored")

        answer = Answer(
            question_id=question.id,
            question=question.text,
            difficulty=question.difficulty,
            answer=text,
            score=result.value,
            time_spent=time_spent,
            timestamp=self.clock(),
        )
        self.state = reducers.set_typing(self.state, False)
        self._record(candidate_id, answer)
        self._post(MessageType.ASSISTANT, f"Your answer scored {answer.score}/10. {score_feedback(answer.score)}")
        await self._advance(candidate_id)
        return answer

    async def tick(self) -> bool:
        """Advance the countdown by one second; True when the question expired."""
        if not self.is_active or self.timer.state != TimerState.RUNNING:
            return False

        expired = self.timer.tick()
        self.state = reducers.update_time_remaining(self.state, self.timer.remaining)
        if not expired:
            await self._persist()
            return False

        await self._expire()
        return True

    async def _expire(self) -> None:
        question = self.current_question
        candidate_id = self.state.interview.current_session.candidate_id
        answer = Answer(
            question_id=question.id,
            question=question.text,
            difficulty=question.difficulty,
            answer="",
            score=MIN_SCORE,
            time_spent=question.time_limit,
            timestamp=self.clock(),
        )
        logger.info("question_expired", candidate_id=candidate_id, question_id=question.id)
        self._record(candidate_id, answer)
        self._post(MessageType.ASSISTANT, "Time's up! Moving on.", is_system_message=True)
        await self._advance(candidate_id)

    def _record(self, candidate_id: str, answer: Answer) -> None:
        candidate = reducers.find_candidate(self.state, candidate_id)
        if candidate is None or candidate.current_question_index >= len(self.state.interview.questions):
            raise InterviewStateError("Every question already has an answer")
        self.state = reducers.add_answer(self.state, candidate_id, answer)

    async def _advance(self, candidate_id: str) -> None:
        interview = self.state.interview
        if interview.current_question_index < len(interview.questions) - 1:
            self.state = reducers.next_question(self.state)
            self.timer.start(self.current_question.time_limit)
            self._post_question()
            await self._persist()
            return
        await self._complete(candidate_id)

    async def _complete(self, candidate_id: str) -> None:
        self.timer.stop()
        answers = reducers.find_candidate(self.state, candidate_id).answers
        generation = self._generation

        self.state = reducers.set_typing(self.state, True)
        result = await self.evaluator.generate_final_summary(answers)
        if generation != self._generation:
            logger.info("stale_summary_dropped", candidate_id=candidate_id)
            return

        score = final_score(answers)
        state = reducers.set_typing(self.state, False)
        state = reducers.complete_interview(state, candidate_id, score, result.value, self.clock())
        self.state = reducers.end_interview(state)
        logger.info(
            "interview_completed",
            candidate_id=candidate_id,
            final_score=score,
            fallback_summary=result.fallback,
        )
        await self._persist()

    async def pause(self) -> None:
        if not self.is_active:
            raise InterviewStateError("No active interview to pause")
        if self.timer.state != TimerState.RUNNING:
            return
        now = self.clock()
        self.timer.pause(now)
        self.state = reducers.pause_interview(self.state, now)
        await self._persist()

    async def resume(self) -> None:
        if not self.is_active:
            raise InterviewStateError("No interview to resume")
        if self.timer.state == TimerState.EXPIRED:
            # Restored with no time left on the clock
            self.state = reducers.resume_interview(self.state)
            await self._expire()
            return
        self.timer.resume()
        self.state = reducers.resume_interview(self.state)
        await self._persist()

    async def reset(self) -> None:
        """Drop every candidate and the active session."""
        self._generation += 1
        self.timer.stop()
        self.state = reducers.reset_state()
        if self.store is not None:
            async with self._save_lock:
                await self.store.clear()
        logger.info("state_reset")
