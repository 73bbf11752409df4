"""
Reducer functions over AppState.

Every function takes the current state and returns a new one; nothing is
mutated in place. Reducers that target a missing candidate or an inactive
session return the state unchanged.
"""
import uuid
from datetime import datetime
from typing import List, Optional

from .models import (
    Answer,
    AppState,
    Candidate,
    ChatMessage,
    InterviewSession,
    InterviewStatus,
    MessageType,
    Question,
    utcnow,
)


def _candidates(state: AppState, **updates) -> AppState:
    return state.model_copy(update={"candidates": state.candidates.model_copy(update=updates)})


def _interview(state: AppState, **updates) -> AppState:
    return state.model_copy(update={"interview": state.interview.model_copy(update=updates)})


def _chat(state: AppState, **updates) -> AppState:
    return state.model_copy(update={"chat": state.chat.model_copy(update=updates)})


def _session(state: AppState, **updates) -> AppState:
    session = state.interview.current_session
    if session is None:
        return state
    return _interview(state, current_session=session.model_copy(update=updates))


def _replace_candidate(state: AppState, candidate_id: str, **updates) -> AppState:
    candidates = [
        c.model_copy(update=updates) if c.id == candidate_id else c
        for c in state.candidates.candidates
    ]
    return _candidates(state, candidates=candidates)


def find_candidate(state: AppState, candidate_id: Optional[str]) -> Optional[Candidate]:
    for candidate in state.candidates.candidates:
        if candidate.id == candidate_id:
            return candidate
    return None


# Candidates

def add_candidate(state: AppState, candidate: Candidate) -> AppState:
    """Add a candidate, replacing any existing record with the same id."""
    others = [c for c in state.candidates.candidates if c.id != candidate.id]
    return _candidates(state, candidates=others + [candidate])


def update_candidate(state: AppState, candidate_id: str, **updates) -> AppState:
    if find_candidate(state, candidate_id) is None:
        return state
    return _replace_candidate(state, candidate_id, **updates)


def add_answer(state: AppState, candidate_id: str, answer: Answer) -> AppState:
    candidate = find_candidate(state, candidate_id)
    if candidate is None:
        return state
    return _replace_candidate(
        state,
        candidate_id,
        answers=candidate.answers + [answer],
        current_question_index=candidate.current_question_index + 1,
    )


def complete_interview(
    state: AppState,
    candidate_id: str,
    score: int,
    summary: str,
    now: Optional[datetime] = None,
) -> AppState:
    if find_candidate(state, candidate_id) is None:
        return state
    return _replace_candidate(
        state,
        candidate_id,
        interview_status=InterviewStatus.COMPLETED,
        final_score=score,
        final_summary=summary,
        end_time=now or utcnow(),
    )


def select_candidate(state: AppState, candidate_id: Optional[str]) -> AppState:
    return _candidates(state, selected_candidate_id=candidate_id)


def reset_candidates(state: AppState) -> AppState:
    return _candidates(state, candidates=[], selected_candidate_id=None)


# Interview

def start_interview(state: AppState, candidate_id: str, now: Optional[datetime] = None) -> AppState:
    session = InterviewSession(candidate_id=candidate_id, start_time=now or utcnow())
    return _interview(
        state,
        current_session=session,
        is_interview_active=True,
        current_question_index=0,
        is_paused=False,
    )


def pause_interview(state: AppState, now: Optional[datetime] = None) -> AppState:
    state = _interview(state, is_paused=True)
    return _session(state, paused_time=now or utcnow())


def resume_interview(state: AppState) -> AppState:
    state = _interview(state, is_paused=False)
    return _session(state, paused_time=None)


def set_questions(state: AppState, questions: List[Question]) -> AppState:
    return _interview(state, questions=list(questions))


def set_current_question(state: AppState, index: int) -> AppState:
    questions = state.interview.questions
    state = _interview(state, current_question_index=index)
    if 0 <= index < len(questions):
        state = _interview(state, time_remaining=questions[index].time_limit)
        state = _session(state, current_question=questions[index])
    return state


def update_time_remaining(state: AppState, seconds: int) -> AppState:
    return _interview(state, time_remaining=max(0, seconds))


def next_question(state: AppState) -> AppState:
    return set_current_question(state, state.interview.current_question_index + 1)


def end_interview(state: AppState) -> AppState:
    return _interview(
        state,
        current_session=None,
        is_interview_active=False,
        current_question_index=0,
        time_remaining=0,
        is_paused=False,
    )


def add_interview_message(
    state: AppState,
    type: MessageType,
    content: str,
    is_system_message: bool = False,
) -> AppState:
    session = state.interview.current_session
    if session is None:
        return state
    message = ChatMessage(
        id=uuid.uuid4().hex,
        type=type,
        content=content,
        is_system_message=is_system_message,
    )
    return _session(state, messages=session.messages + [message])


# Chat

def add_message(state: AppState, message: ChatMessage) -> AppState:
    return _chat(state, messages=state.chat.messages + [message])


def set_typing(state: AppState, is_typing: bool) -> AppState:
    return _chat(state, is_typing=is_typing)


def clear_messages(state: AppState) -> AppState:
    return _chat(state, messages=[])


def reset_state() -> AppState:
    return AppState()
