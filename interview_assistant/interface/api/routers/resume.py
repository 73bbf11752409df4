from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from ....application.models import ResumeMeta
from ....processors.resume import ResumeTextExtractor
from ..deps import get_extractor
from ..schemas import ResumeUploadResponse

router = APIRouter(tags=["resume"])

@router.post("/resume", response_model=ResumeUploadResponse)
async def upload_resume(
    file: UploadFile = File(...),
    extractor: ResumeTextExtractor = Depends(get_extractor),
):
    """
    Extract text and contact details from an uploaded PDF or DOCX resume.

    The text itself is not kept; the caller pre-fills the profile form with
    the extracted contact and sends the returned resume metadata along when
    creating the candidate.
    """
    content = await file.read()
    mime_type = file.content_type or ""
    parsed = await run_in_threadpool(extractor.parse, content, mime_type)

    contact = parsed.contact
    return ResumeUploadResponse(
        resume=ResumeMeta(
            file_name=file.filename or "resume",
            file_size=len(content),
            file_type=mime_type,
        ),
        contact=contact,
        text_length=len(parsed.text),
        extracted_fields=sum(1 for value in (contact.name, contact.email, contact.phone) if value),
    )
