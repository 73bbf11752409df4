from typing import Optional

from fastapi import APIRouter, Depends, status

from ....application.interview_session import InterviewFlow
from ....application.models import Candidate, Question
from ....managers.evaluation import score_feedback
from ..deps import get_flow
from ..schemas import AnswerResponse, AnswerSubmit, InterviewStateResponse, StartInterviewRequest

router = APIRouter(prefix="/interview", tags=["interview"])

def _snapshot(flow: InterviewFlow) -> InterviewStateResponse:
    interview = flow.state.interview
    session = interview.current_session
    return InterviewStateResponse(
        is_active=flow.is_active,
        is_paused=interview.is_paused,
        timer_state=flow.timer.state.value,
        time_remaining=interview.time_remaining,
        current_question_index=interview.current_question_index,
        total_questions=len(interview.questions),
        current_question=flow.current_question,
        candidate=flow.current_candidate,
        messages=session.messages if session else flow.state.chat.messages,
    )

@router.post("/start", response_model=Question)
async def start_interview(payload: StartInterviewRequest, flow: InterviewFlow = Depends(get_flow)):
    """Generate the questions and return the first one."""
    return await flow.start_interview(payload.candidate_id)

@router.post("/answer", response_model=AnswerResponse)
async def submit_answer(payload: AnswerSubmit, flow: InterviewFlow = Depends(get_flow)):
    answer = await flow.submit_answer(payload.answer, payload.question_id)
    return AnswerResponse(
        score=answer.score,
        feedback=score_feedback(answer.score),
        completed=not flow.is_active,
    )

@router.get("/state", response_model=InterviewStateResponse)
async def interview_state(flow: InterviewFlow = Depends(get_flow)):
    return _snapshot(flow)

@router.post("/pause", response_model=InterviewStateResponse)
async def pause_interview(flow: InterviewFlow = Depends(get_flow)):
    await flow.pause()
    return _snapshot(flow)

@router.post("/resume", response_model=InterviewStateResponse)
async def resume_interview(flow: InterviewFlow = Depends(get_flow)):
    await flow.resume()
    return _snapshot(flow)

@router.get("/pending", response_model=Optional[Candidate])
async def pending_interview(flow: InterviewFlow = Depends(get_flow)):
    """Candidate with an unfinished interview, for the welcome-back prompt."""
    return flow.pending_resume()

@router.post("/reset", status_code=status.HTTP_204_NO_CONTENT)
async def reset_state(flow: InterviewFlow = Depends(get_flow)):
    await flow.reset()
