# tests/test_state.py
from datetime import datetime, timezone

from interview_assistant.application import state as reducers
from interview_assistant.application.models import (
    Answer,
    AppState,
    Candidate,
    Difficulty,
    InterviewStatus,
    MessageType,
)
from interview_assistant.managers.evaluation import FALLBACK_QUESTIONS

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

def candidate(candidate_id="c1", **fields):
    values = {"name": "John Smith", "email": "john@x.com", "phone": "5551234567"}
    values.update(fields)
    return Candidate(id=candidate_id, **values)

def answer(score=7):
    return Answer(question_id="q1", question="Q?", difficulty=Difficulty.EASY,
                  answer="A", score=score, time_spent=3, timestamp=NOW)

def test_reducers_do_not_mutate_input():
    before = AppState()
    after = reducers.add_candidate(before, candidate())
    assert before.candidates.candidates == []
    assert len(after.candidates.candidates) == 1

def test_add_candidate_replaces_same_id():
    state = reducers.add_candidate(AppState(), candidate())
    state = reducers.add_candidate(state, candidate(name="Jane Roe"))
    assert [c.name for c in state.candidates.candidates] == ["Jane Roe"]

def test_add_answer_advances_index():
    state = reducers.add_candidate(AppState(), candidate())
    state = reducers.add_answer(state, "c1", answer())
    stored = reducers.find_candidate(state, "c1")
    assert stored.current_question_index == 1
    assert stored.answers[0].score == 7

def test_unknown_candidate_is_noop():
    state = AppState()
    assert reducers.add_answer(state, "missing", answer()) == state
    assert reducers.update_candidate(state, "missing", name="X") == state
    assert reducers.complete_interview(state, "missing", 5, "x") == state

def test_complete_interview_sets_score_and_status():
    state = reducers.add_candidate(AppState(), candidate())
    state = reducers.complete_interview(state, "c1", 8, "Great", NOW)
    stored = reducers.find_candidate(state, "c1")
    assert stored.interview_status == InterviewStatus.COMPLETED
    assert stored.final_score == 8
    assert stored.final_summary == "Great"
    assert stored.end_time == NOW

def test_session_lifecycle():
    state = reducers.set_questions(AppState(), FALLBACK_QUESTIONS)
    state = reducers.start_interview(state, "c1", NOW)
    state = reducers.set_current_question(state, 0)
    assert state.interview.is_interview_active
    assert state.interview.time_remaining == 20
    assert state.interview.current_session.current_question.id == "q1"

    state = reducers.next_question(state)
    state = reducers.next_question(state)
    assert state.interview.current_question_index == 2
    assert state.interview.time_remaining == 60

    state = reducers.pause_interview(state, NOW)
    assert state.interview.is_paused
    assert state.interview.current_session.paused_time == NOW
    state = reducers.resume_interview(state)
    assert state.interview.current_session.paused_time is None

    state = reducers.end_interview(state)
    assert state.interview.current_session is None
    assert not state.interview.is_interview_active
    assert state.interview.time_remaining == 0

def test_interview_messages_need_a_session():
    state = reducers.add_interview_message(AppState(), MessageType.USER, "hello")
    assert state == AppState()

    state = reducers.start_interview(AppState(), "c1")
    state = reducers.add_interview_message(state, MessageType.ASSISTANT, "Question 1", is_system_message=True)
    message = state.interview.current_session.messages[0]
    assert message.content == "Question 1"
    assert message.is_system_message

def test_chat_slice():
    state = reducers.set_typing(AppState(), True)
    assert state.chat.is_typing
    state = reducers.clear_messages(state)
    assert state.chat.messages == []

def test_reset_candidates():
    state = reducers.add_candidate(AppState(), candidate())
    state = reducers.select_candidate(state, "c1")
    state = reducers.reset_candidates(state)
    assert state.candidates.candidates == []
    assert state.candidates.selected_candidate_id is None
