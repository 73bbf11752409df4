import json
import os
from pathlib import Path
from typing import Optional

import aiofiles
import structlog
from pydantic import ValidationError

from ..application.models import AppState
from ..core.interfaces import StateStore

logger = structlog.get_logger(__name__)

ROOT_KEY = "root"


class JsonStateStore(StateStore):
    """
    Persists the whole application state as one JSON document.

    The file holds ``{"root": {...}}`` with every timestamp as an ISO-8601
    string. Writes go to a sibling temp file first and are then renamed over
    the target.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def load(self) -> Optional[AppState]:
        if not self.path.exists():
            return None

        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            raw = await f.read()

        try:
            payload = json.loads(raw)
            return AppState.model_validate(payload[ROOT_KEY])
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            logger.error("state_load_failed", path=str(self.path), error=str(e))
            return None

    async def save(self, state: AppState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {ROOT_KEY: state.model_dump(mode="json")}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(payload, indent=2))
        os.replace(tmp_path, self.path)
        logger.debug("state_saved", path=str(self.path))

    async def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("state_cleared", path=str(self.path))


class MemoryStateStore(StateStore):
    """Keeps the serialised state in memory; used when persistence is disabled."""

    def __init__(self):
        self.payload: Optional[dict] = None

    async def load(self) -> Optional[AppState]:
        if self.payload is None:
            return None
        return AppState.model_validate(self.payload[ROOT_KEY])

    async def save(self, state: AppState) -> None:
        self.payload = {ROOT_KEY: state.model_dump(mode="json")}

    async def clear(self) -> None:
        self.payload = None
