from fastapi import Request

from ...application.interview_session import InterviewFlow
from ...core.config import Settings
from ...processors.resume import ResumeTextExtractor


def get_flow(request: Request) -> InterviewFlow:
    return request.app.state.flow


def get_extractor(request: Request) -> ResumeTextExtractor:
    return request.app.state.extractor


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with, not the process-wide cache."""
    return request.app.state.settings
