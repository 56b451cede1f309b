"""
File-backed project store: one JSON document per project.
"""
from pathlib import Path
from typing import List, Optional, Union

from visionscrum.logs import get_logger
from visionscrum.models import Project
from visionscrum.recovery import FileOperationError, ProjectNotFoundError, VisionScrumError
from .io import atomic_write, load_model, DATA_JSON, DATA_YAML

log = get_logger("data.store")

class ProjectStore:
    """Saves whole projects and hands back the most recently saved version."""

    SUFFIX = ".json"

    def __init__(self, base_dir: Union[Path, str]):
        self.base_dir = Path(base_dir)

    def _path(self, project_id: str) -> Path:
        if not project_id or "/" in project_id or "\\" in project_id or project_id.startswith("."):
            raise ProjectNotFoundError(f"Invalid project id: {project_id!r}")
        return self.base_dir / f"{project_id}{self.SUFFIX}"

    def save(self, project: Project) -> Path:
        path = self._path(project.id)
        atomic_write(DATA_JSON, path, project.to_dict(), create_dirs=True)
        log.debug(f"Saved project {project.id} to {path}")
        return path

    def load(self, project_id: str) -> Optional[Project]:
        """Return the stored project, or None if there is none with this id."""
        return load_model(Project, self._path(project_id))

    def get(self, project_id: str) -> Project:
        """Like load, but a missing project is an error."""
        project = self.load(project_id)
        if project is None:
            raise ProjectNotFoundError(f"No project with id {project_id}")
        return project

    def exists(self, project_id: str) -> bool:
        return self._path(project_id).exists()

    def delete(self, project_id: str) -> bool:
        path = self._path(project_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise FileOperationError(f"Cannot delete {path}: {e}") from e
        log.info(f"Deleted project {project_id}")
        return True

    def list_projects(self) -> List[Project]:
        """All readable stored projects, oldest first. Unreadable files are logged and skipped."""
        if not self.base_dir.exists():
            return []
        projects = []
        for path in sorted(self.base_dir.glob(f"*{self.SUFFIX}")):
            try:
                project = load_model(Project, path)
            except VisionScrumError as e:
                log.error(f"Skipping {path.name}: {e}")
                continue
            if project is not None:
                projects.append(project)
        return sorted(projects, key=lambda p: p.created_at)

    def export(self, project_id: str, destination: Union[Path, str], data_type: int = DATA_JSON) -> Path:
        """Write a copy of a stored project elsewhere, as JSON or YAML."""
        project = self.get(project_id)
        destination = Path(destination)
        atomic_write(data_type, destination, project.to_dict(), create_dirs=True)
        log.info(f"Exported project {project_id} to {destination} as {'YAML' if data_type == DATA_YAML else 'JSON'}")
        return destination
