"""
Turn an analyzer draft into a canonical Project with freshly minted ids.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Set

from .logs import get_logger
from .models import (
    Card, CardStatus, ImageInput, Project, ProjectDraft, Sprint, Task,
    generate_id, utcnow,
)
from .recovery import IngestionError

log = get_logger("ingest")

SPRINT_LENGTH_DAYS = 15
DEFAULT_TOTAL_HOURS = 40

def _build_card(draft: ProjectDraft.Card, taken: Set[str]) -> Card:
    card_id = generate_id(taken)
    taken.add(card_id)

    tasks: List[Task] = []
    task_ids: Set[str] = set()
    for content in draft.tasks:
        task_id = generate_id(task_ids)
        task_ids.add(task_id)
        tasks.append(Task(id=task_id, content=content))

    return Card(
        id=card_id,
        title=draft.title,
        description=draft.description,
        story_points=draft.story_points,
        status=CardStatus.TODO,
        tags=list(draft.tags) if draft.tags else [],
        tasks=tasks,
    )

def sprint_window(reference_instant: datetime, index: int):
    """Start and end of the sprint at zero-based position `index`."""
    start = reference_instant + timedelta(days=index * SPRINT_LENGTH_DAYS)
    return start, start + timedelta(days=SPRINT_LENGTH_DAYS)

def build_project(draft: ProjectDraft, reference_instant: Optional[datetime] = None,
                  total_hours: Optional[float] = DEFAULT_TOTAL_HOURS) -> Project:
    """
    Build a new project from a validated draft.

    Args:
        draft: Structure returned by the analyzer
        reference_instant: Creation time and start of the first sprint, defaults to now (UTC)
        total_hours: Hour budget of the project, None for no budget

    Returns:
        A complete Project; every card is `todo` and every task unticked.
    """
    now = reference_instant or utcnow()
    card_ids: Set[str] = set()

    backlog = [_build_card(c, card_ids) for c in draft.backlog_cards]

    sprints: List[Sprint] = []
    sprint_ids: Set[str] = set()
    for index, draft_sprint in enumerate(draft.sprints):
        start, end = sprint_window(now, index)
        sprint_id = generate_id(sprint_ids)
        sprint_ids.add(sprint_id)
        sprints.append(Sprint(
            id=sprint_id,
            name=draft_sprint.name,
            start_date=start,
            end_date=end,
            cards=[_build_card(c, card_ids) for c in draft_sprint.cards],
        ))

    project = Project(
        id=generate_id(),
        name=draft.project_name,
        description=draft.project_description,
        created_at=now,
        total_hours=total_hours,
        backlog=backlog,
        sprints=sprints,
    )
    log.info(f"Built project {project.id} with {len(backlog)} backlog cards and {len(sprints)} sprints")
    return project

def ingest_images(analyzer, images: Sequence[ImageInput], reference_instant: Optional[datetime] = None,
                  total_hours: Optional[float] = DEFAULT_TOTAL_HOURS) -> Project:
    """Analyze the images and build the project, or raise IngestionError without building anything."""
    if not images:
        raise IngestionError("At least one image is required")

    try:
        draft = analyzer.analyze(images)
    except IngestionError:
        raise
    except Exception as e:
        log.error(f"Image analysis failed: {e}")
        raise IngestionError(f"Image analysis failed: {e}") from e

    if not isinstance(draft, ProjectDraft):
        raise IngestionError(f"Analyzer returned {type(draft).__name__}, expected a ProjectDraft")

    try:
        return build_project(draft, reference_instant=reference_instant, total_hours=total_hours)
    except ValueError as e:
        raise IngestionError(f"Draft could not be turned into a project: {e}") from e
