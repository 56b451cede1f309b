"""
Read-only aggregations over a project snapshot.

Nothing here holds state: every figure is recomputed from the project passed in.
"""
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import Card, CardStatus, Project, Sprint

class ProjectStats(BaseModel):
    """Progress figures shown on the project overview."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total_tasks: int = 0
    completed_tasks: int = 0
    percentage: int = Field(default=0, ge=0, le=100)
    total_points: int = 0
    completed_points: int = 0
    assignee_distribution: Dict[str, int] = Field(default_factory=dict)

class ProjectSummary(BaseModel):
    """One dashboard line."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str
    created_at: datetime
    sprint_count: int
    total_hours: Optional[float] = None

def _percentage(done: int, total: int) -> int:
    if total == 0:
        return 0
    # round half up
    return (200 * done + total) // (2 * total)

def compute_stats(project: Project) -> ProjectStats:
    """Fold every card of the backlog and all sprints into one set of figures."""
    total_tasks = 0
    completed_tasks = 0
    total_points = 0
    completed_points = 0
    distribution: Dict[str, int] = {}

    for card in project.iter_cards():
        points = card.story_points or 0
        total_points += points
        if card.status == CardStatus.DONE:
            completed_points += points
        for task in card.tasks:
            total_tasks += 1
            if task.completed:
                completed_tasks += 1
            for assignee in task.assignees:
                distribution[assignee] = distribution.get(assignee, 0) + 1

    return ProjectStats(
        total_tasks=total_tasks,
        completed_tasks=completed_tasks,
        percentage=_percentage(completed_tasks, total_tasks),
        total_points=total_points,
        completed_points=completed_points,
        assignee_distribution=distribution,
    )

def card_progress(card: Card) -> Tuple[int, int]:
    """Return (completed, total) checklist items of a card."""
    return sum(1 for t in card.tasks if t.completed), len(card.tasks)

def card_assignees(card: Card) -> List[str]:
    """Distinct people on a card's tasks, in order of first appearance."""
    seen: Dict[str, None] = {}
    for task in card.tasks:
        for assignee in task.assignees:
            seen.setdefault(assignee, None)
    return list(seen)

def sprint_columns(sprint: Sprint) -> Dict[CardStatus, List[Card]]:
    """Split a sprint's cards into kanban columns, keeping card order."""
    columns: Dict[CardStatus, List[Card]] = {status: [] for status in CardStatus}
    for card in sprint.cards:
        columns[card.status].append(card)
    return columns

def project_summary(project: Project) -> ProjectSummary:
    return ProjectSummary(
        id=project.id,
        name=project.name,
        description=project.description,
        created_at=project.created_at,
        sprint_count=len(project.sprints),
        total_hours=project.total_hours,
    )
