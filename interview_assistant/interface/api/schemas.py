from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ...application.models import (
    Candidate,
    ChatMessage,
    ExtractedContact,
    InterviewStatus,
    Question,
    ResumeMeta,
)


class ResumeUploadResponse(BaseModel):
    resume: ResumeMeta
    contact: ExtractedContact
    text_length: int
    extracted_fields: int


class CandidateCreate(BaseModel):
    # Whitespace is stripped before the length checks run
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    resume: Optional[ResumeMeta] = None


class StartInterviewRequest(BaseModel):
    candidate_id: str


class AnswerSubmit(BaseModel):
    question_id: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class AnswerResponse(BaseModel):
    score: int
    feedback: str
    completed: bool


class CandidateSummary(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    interview_status: InterviewStatus
    answered: int
    final_score: Optional[int] = None

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "CandidateSummary":
        return cls(
            id=candidate.id,
            name=candidate.name,
            email=candidate.email,
            phone=candidate.phone,
            interview_status=candidate.interview_status,
            answered=len(candidate.answers),
            final_score=candidate.final_score,
        )


class InterviewStateResponse(BaseModel):
    is_active: bool
    is_paused: bool
    timer_state: str
    time_remaining: int
    current_question_index: int
    total_questions: int
    current_question: Optional[Question] = None
    candidate: Optional[Candidate] = None
    messages: List[ChatMessage] = Field(default_factory=list)
