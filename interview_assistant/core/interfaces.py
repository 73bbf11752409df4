from abc import ABC, abstractmethod
from typing import List, Optional

from ..application.models import Answer, AppState, Question


class CompletionService(ABC):
    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send a single prompt and return the generated text.

        Raises AuthError when no usable credential is configured and
        ServiceError when the remote call fails or returns no content.
        """
        pass


class InterviewEvaluator(ABC):
    @abstractmethod
    async def generate_questions(self, strict: bool = False):
        """Return the six interview questions (2 easy, 2 medium, 2 hard)."""
        pass

    @abstractmethod
    async def evaluate_answer(self, question: Question, answer: str):
        """Score one answer on a 1-10 scale."""
        pass

    @abstractmethod
    async def generate_final_summary(self, answers: List[Answer]):
        """Summarise the whole interview in a few sentences."""
        pass


class StateStore(ABC):
    @abstractmethod
    async def load(self) -> Optional[AppState]:
        """Load the persisted application state, or None if nothing is stored."""
        pass

    @abstractmethod
    async def save(self, state: AppState) -> None:
        """Persist the full application state."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove any persisted state."""
        pass
