"""
Board session: the canonical project snapshot plus the currently open card.

The open card is never patched by hand. After every operation it is
re-derived from the new snapshot by id, so it cannot drift from the project.
"""
from typing import Any, Callable, Mapping, Optional, Union

from . import engine
from .logs import get_logger
from .models import Card, CardUpdate, Project
from .stats import ProjectStats, compute_stats

log = get_logger("view")

def reconcile(project: Project, open_card: Optional[Card]) -> Optional[Card]:
    """Re-read the open card from `project`; None once it no longer exists."""
    if open_card is None:
        return None
    card = engine.find_card(project, open_card.id)
    if card is None:
        log.debug(f"Open card {open_card.id} is gone, closing it")
        return None
    return card.model_copy(deep=True)

class BoardSession:
    """Single writer for one project: applies operations and keeps the open card in sync."""

    def __init__(self, project: Project, on_update: Optional[Callable[[Project], None]] = None):
        self._project = project
        self._open_card: Optional[Card] = None
        self._on_update = on_update

    @property
    def project(self) -> Project:
        return self._project

    @property
    def open_card(self) -> Optional[Card]:
        return self._open_card

    @property
    def stats(self) -> ProjectStats:
        return compute_stats(self._project)

    def open(self, card_id: str) -> Optional[Card]:
        """Open a card for editing; unknown ids leave nothing open."""
        card = engine.find_card(self._project, card_id)
        self._open_card = card.model_copy(deep=True) if card is not None else None
        return self._open_card

    def close(self):
        self._open_card = None

    def apply(self, operation: Callable[..., Project], *args: Any, **kwargs: Any) -> Project:
        """Run an engine operation against the current snapshot and publish the result."""
        updated = operation(self._project, *args, **kwargs)
        if updated is not self._project:
            self._project = updated
            if self._on_update is not None:
                self._on_update(updated)
        self._open_card = reconcile(self._project, self._open_card)
        return self._project

    def create_backlog_card(self) -> Card:
        """Add a default card to the backlog and open it."""
        self.apply(engine.create_backlog_card)
        return self.open(self._project.backlog[0].id)

    def delete_card(self, card_id: str) -> Project:
        return self.apply(engine.delete_card, card_id)

    def update_card_fields(self, card_id: str, fields: Union[CardUpdate, Mapping[str, Any]]) -> Project:
        return self.apply(engine.update_card_fields, card_id, fields)

    def add_task(self, card_id: str, content: str) -> Project:
        return self.apply(engine.add_task, card_id, content)

    def delete_task(self, card_id: str, task_id: str) -> Project:
        return self.apply(engine.delete_task, card_id, task_id)

    def toggle_task(self, card_id: str, task_id: str) -> Project:
        return self.apply(engine.toggle_task, card_id, task_id)

    def add_assignee(self, card_id: str, task_id: str, name: str) -> Project:
        return self.apply(engine.add_assignee, card_id, task_id, name)

    def remove_assignee(self, card_id: str, task_id: str, name: str) -> Project:
        return self.apply(engine.remove_assignee, card_id, task_id, name)

    def update_project_details(self, name: Optional[str] = None, description: Optional[str] = None) -> Project:
        return self.apply(engine.update_project_details, name=name, description=description)
