from typing import List, Optional

from .models import Candidate, InterviewStatus


def filter_candidates(
    candidates: List[Candidate],
    search: Optional[str] = None,
    status: Optional[InterviewStatus] = None,
) -> List[Candidate]:
    """Case-insensitive name/email search plus an optional status filter."""
    needle = (search or "").strip().lower()
    return [
        c for c in candidates
        if (not needle or needle in c.name.lower() or needle in c.email.lower())
        and (status is None or c.interview_status == status)
    ]


def rank_candidates(candidates: List[Candidate]) -> List[Candidate]:
    """Completed interviews first, best score first; others keep their order."""
    completed = [c for c in candidates if c.interview_status == InterviewStatus.COMPLETED]
    others = [c for c in candidates if c.interview_status != InterviewStatus.COMPLETED]
    completed.sort(key=lambda c: c.final_score or 0, reverse=True)
    return completed + others


def dashboard_view(
    candidates: List[Candidate],
    search: Optional[str] = None,
    status: Optional[InterviewStatus] = None,
) -> List[Candidate]:
    return rank_candidates(filter_candidates(candidates, search, status))
