from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class InterviewStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MessageType(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


# Seconds allowed per difficulty band
TIME_LIMITS = {
    Difficulty.EASY: 20,
    Difficulty.MEDIUM: 60,
    Difficulty.HARD: 120,
}


class _Record(BaseModel):
    """Immutable base; dumping with mode="json" renders datetimes as ISO-8601."""
    model_config = ConfigDict(frozen=True)


class Question(_Record):
    id: str
    text: str
    difficulty: Difficulty
    time_limit: int
    category: str = "General"


class Answer(_Record):
    question_id: str
    question: str
    difficulty: Difficulty
    answer: str
    score: int = Field(ge=1, le=10)
    time_spent: int = Field(ge=0)
    timestamp: datetime = Field(default_factory=utcnow)


class ExtractedContact(_Record):
    """Best-effort contact details; None means the field was not found."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ResumeMeta(_Record):
    file_name: str
    file_size: int
    file_type: str
    upload_date: datetime = Field(default_factory=utcnow)


class Candidate(_Record):
    id: str
    name: str
    email: str
    phone: str
    resume: Optional[ResumeMeta] = None
    interview_status: InterviewStatus = InterviewStatus.NOT_STARTED
    current_question_index: int = 0
    answers: List[Answer] = Field(default_factory=list)
    final_score: Optional[int] = None
    final_summary: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class ChatMessage(_Record):
    id: str
    type: MessageType
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    is_system_message: bool = False


class InterviewSession(_Record):
    candidate_id: str
    is_active: bool = True
    current_question: Optional[Question] = None
    messages: List[ChatMessage] = Field(default_factory=list)
    start_time: datetime = Field(default_factory=utcnow)
    paused_time: Optional[datetime] = None


class CandidatesState(_Record):
    candidates: List[Candidate] = Field(default_factory=list)
    selected_candidate_id: Optional[str] = None


class InterviewState(_Record):
    current_session: Optional[InterviewSession] = None
    is_interview_active: bool = False
    questions: List[Question] = Field(default_factory=list)
    current_question_index: int = 0
    time_remaining: int = 0
    is_paused: bool = False


class ChatState(_Record):
    messages: List[ChatMessage] = Field(default_factory=list)
    is_typing: bool = False


class AppState(_Record):
    candidates: CandidatesState = Field(default_factory=CandidatesState)
    interview: InterviewState = Field(default_factory=InterviewState)
    chat: ChatState = Field(default_factory=ChatState)
