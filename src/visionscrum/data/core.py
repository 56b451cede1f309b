"""
DataCore - Central entry point to stored projects.

Resolves where projects live, hands out the store and opens board sessions
whose changes are written back when the session ends.
"""
import os
from pathlib import Path
from typing import Optional

from visionscrum.logs import get_logger
from visionscrum.models import Project
from visionscrum.view import BoardSession
from .store import ProjectStore

log = get_logger("data")

class BoardContext:
    """Context manager around a BoardSession that saves the project on a clean exit."""

    def __init__(self, store: ProjectStore, project_id: str):
        self.store = store
        self.project_id = project_id
        self.session: Optional[BoardSession] = None
        self._loaded: Optional[Project] = None

    def __enter__(self) -> BoardSession:
        self._loaded = self.store.get(self.project_id)
        self.session = BoardSession(self._loaded)
        return self.session

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - save if something changed and nothing failed."""
        if exc_type is not None:
            log.warning(f"Discarding changes to {self.project_id}: {exc_val}")
            return False
        if self.session.project is not self._loaded:
            self.store.save(self.session.project)
        return False

class DataCore:
    DATA_DIR_ENV = "VISIONSCRUM_DATA_DIR"
    DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "visionscrum" / "data"

    @classmethod
    def data_dir(cls) -> Path:
        configured = os.getenv(cls.DATA_DIR_ENV)
        return Path(configured).expanduser() if configured else cls.DEFAULT_DATA_DIR

    @classmethod
    def store(cls) -> ProjectStore:
        data_dir = cls.data_dir()
        log.debug(f"Using data directory {data_dir}")
        return ProjectStore(data_dir)

    @classmethod
    def open_board(cls, project_id: str) -> BoardContext:
        return BoardContext(cls.store(), project_id)
