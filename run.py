import uvicorn
import sys
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.absolute())
sys.path.insert(0, project_root)

from interview_assistant.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()

    # Ensure the state directory exists before the first save
    settings.STATE_FILE.parent.mkdir(parents=True, exist_ok=True)

    uvicorn.run(
        "interview_assistant.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
