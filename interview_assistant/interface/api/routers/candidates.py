from typing import List, Optional

from fastapi import APIRouter, Depends, status

from ....application.dashboard import dashboard_view
from ....application.interview_session import InterviewFlow
from ....application.models import Candidate, InterviewStatus
from ..deps import get_flow
from ..schemas import CandidateCreate, CandidateSummary

router = APIRouter(tags=["candidates"])

@router.post("/candidates", response_model=Candidate, status_code=status.HTTP_201_CREATED)
async def create_candidate(payload: CandidateCreate, flow: InterviewFlow = Depends(get_flow)):
    return await flow.create_candidate(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        resume=payload.resume,
    )

@router.get("/candidates", response_model=List[CandidateSummary])
async def list_candidates(
    search: Optional[str] = None,
    status: Optional[InterviewStatus] = None,
    flow: InterviewFlow = Depends(get_flow),
):
    """Interviewer dashboard: completed candidates first, best score first."""
    candidates = dashboard_view(flow.state.candidates.candidates, search, status)
    return [CandidateSummary.from_candidate(c) for c in candidates]

@router.get("/candidates/{candidate_id}", response_model=Candidate)
async def get_candidate(candidate_id: str, flow: InterviewFlow = Depends(get_flow)):
    """Full candidate record including every answer transcript."""
    return flow.get_candidate(candidate_id)

@router.post("/candidates/{candidate_id}/select", response_model=Candidate)
async def select_candidate(candidate_id: str, flow: InterviewFlow = Depends(get_flow)):
    flow.select_candidate(candidate_id)
    return flow.get_candidate(candidate_id)
