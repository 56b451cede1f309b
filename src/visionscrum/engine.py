"""
Project mutation engine.

Every operation takes a Project snapshot and returns a new one; the input is
never modified. Lookups follow the dual-container rule: the backlog is scanned
first, then each sprint's card list in sprint order. A card lives in exactly
one of those containers.

Operations that cannot apply (unknown ids, blank text, invalid field values)
return the given project unchanged.
"""
from typing import Any, Callable, List, Mapping, NamedTuple, Optional, Union

from pydantic import ValidationError

from .logs import get_logger
from .models import Card, CardStatus, CardUpdate, Project, Task, generate_id

log = get_logger("engine")

DEFAULT_CARD_TITLE = "New Task"
DEFAULT_CARD_DESCRIPTION = "Task description..."
DEFAULT_STORY_POINTS = 1

class CardLocation(NamedTuple):
    """Where a card lives: the backlog when sprint_index is None, else that sprint."""
    sprint_index: Optional[int]
    card_index: int

    @property
    def in_backlog(self) -> bool:
        return self.sprint_index is None

def locate_card(project: Project, card_id: str) -> Optional[CardLocation]:
    """Find the container holding a card, backlog first."""
    for index, card in enumerate(project.backlog):
        if card.id == card_id:
            return CardLocation(None, index)
    for sprint_index, sprint in enumerate(project.sprints):
        for index, card in enumerate(sprint.cards):
            if card.id == card_id:
                return CardLocation(sprint_index, index)
    return None

def find_card(project: Project, card_id: str) -> Optional[Card]:
    location = locate_card(project, card_id)
    if location is None:
        return None
    return _cards_at(project, location)[location.card_index]

def _cards_at(project: Project, location: CardLocation) -> List[Card]:
    if location.in_backlog:
        return project.backlog
    return project.sprints[location.sprint_index].cards

def _with_cards(project: Project, location: CardLocation, cards: List[Card]) -> Project:
    """Return a copy of the project with the container at `location` swapped for `cards`."""
    if location.in_backlog:
        return project.model_copy(update={"backlog": cards})
    sprints = list(project.sprints)
    sprint = sprints[location.sprint_index]
    sprints[location.sprint_index] = sprint.model_copy(update={"cards": cards})
    return project.model_copy(update={"sprints": sprints})

def _replace_card(project: Project, location: CardLocation, card: Card) -> Project:
    cards = list(_cards_at(project, location))
    cards[location.card_index] = card
    return _with_cards(project, location, cards)

def _update_card(project: Project, card_id: str, change: Callable[[Card], Optional[Card]]) -> Project:
    """Apply `change` to the located card; a None result means nothing to do."""
    location = locate_card(project, card_id)
    if location is None:
        log.debug(f"Card {card_id} not found in project {project.id}")
        return project
    card = _cards_at(project, location)[location.card_index]
    updated = change(card)
    if updated is None:
        return project
    return _replace_card(project, location, updated)

def _update_task(project: Project, card_id: str, task_id: str, change: Callable[[Task], Optional[Task]]) -> Project:
    def change_card(card: Card) -> Optional[Card]:
        tasks = list(card.tasks)
        for index, task in enumerate(tasks):
            if task.id == task_id:
                updated = change(task)
                if updated is None:
                    return None
                tasks[index] = updated
                return card.model_copy(update={"tasks": tasks})
        log.debug(f"Task {task_id} not found in card {card_id}")
        return None

    return _update_card(project, card_id, change_card)

def create_backlog_card(project: Project) -> Project:
    """Prepend a fresh default card to the backlog."""
    card = Card(
        id=generate_id(project.card_ids(), prefix="card-"),
        title=DEFAULT_CARD_TITLE,
        description=DEFAULT_CARD_DESCRIPTION,
        story_points=DEFAULT_STORY_POINTS,
        status=CardStatus.TODO,
    )
    log.debug(f"Created card {card.id} in backlog of {project.id}")
    return project.model_copy(update={"backlog": [card, *project.backlog]})

def delete_card(project: Project, card_id: str) -> Project:
    """Remove a card from whichever container holds it."""
    location = locate_card(project, card_id)
    if location is None:
        log.debug(f"Card {card_id} not found in project {project.id}")
        return project
    cards = list(_cards_at(project, location))
    del cards[location.card_index]
    log.debug(f"Deleted card {card_id} from {'backlog' if location.in_backlog else f'sprint {location.sprint_index}'}")
    return _with_cards(project, location, cards)

def update_card_fields(project: Project, card_id: str, fields: Union[CardUpdate, Mapping[str, Any]]) -> Project:
    """
    Shallow-merge editable fields into a card.

    Args:
        project: Current snapshot
        card_id: Card to edit
        fields: Any of title, description, story_points (or storyPoints), status, tags.
            Other keys, including id and tasks, are ignored.

    Returns:
        The new snapshot, or `project` itself if the card is missing or the
        merged values are invalid.
    """
    try:
        if not isinstance(fields, CardUpdate):
            fields = CardUpdate.model_validate(dict(fields))
    except ValidationError as e:
        log.debug(f"Rejected update for card {card_id}: {e}")
        return project

    updates = fields.model_dump(exclude_unset=True)
    if not updates:
        return project

    def merge(card: Card) -> Optional[Card]:
        merged = {**card.model_dump(), **updates}
        try:
            return Card.model_validate(merged)
        except ValidationError as e:
            log.debug(f"Rejected update for card {card_id}: {e}")
            return None

    return _update_card(project, card_id, merge)

def add_task(project: Project, card_id: str, content: str) -> Project:
    """Append a new unticked checklist item to a card."""
    if not content or not content.strip():
        log.debug(f"Ignoring empty task for card {card_id}")
        return project

    def append(card: Card) -> Card:
        task = Task(id=generate_id(card.task_ids()), content=content)
        return card.model_copy(update={"tasks": [*card.tasks, task]})

    return _update_card(project, card_id, append)

def delete_task(project: Project, card_id: str, task_id: str) -> Project:
    def remove(card: Card) -> Optional[Card]:
        if card.find_task(task_id) is None:
            log.debug(f"Task {task_id} not found in card {card_id}")
            return None
        return card.model_copy(update={"tasks": [t for t in card.tasks if t.id != task_id]})

    return _update_card(project, card_id, remove)

def toggle_task(project: Project, card_id: str, task_id: str) -> Project:
    return _update_task(project, card_id, task_id,
                        lambda task: task.model_copy(update={"completed": not task.completed}))

def add_assignee(project: Project, card_id: str, task_id: str, name: str) -> Project:
    """Add a person to a task; adding a name that is already there does nothing."""
    if not name or not name.strip():
        log.debug(f"Ignoring empty assignee for task {task_id}")
        return project

    def assign(task: Task) -> Optional[Task]:
        if name in task.assignees:
            return None
        return task.model_copy(update={"assignees": [*task.assignees, name]})

    return _update_task(project, card_id, task_id, assign)

def remove_assignee(project: Project, card_id: str, task_id: str, name: str) -> Project:
    def unassign(task: Task) -> Optional[Task]:
        if name not in task.assignees:
            return None
        return task.model_copy(update={"assignees": [a for a in task.assignees if a != name]})

    return _update_task(project, card_id, task_id, unassign)

def update_project_details(project: Project, name: Optional[str] = None, description: Optional[str] = None) -> Project:
    """Rename and/or re-describe the project. A blank name is rejected."""
    updates = {}
    if name is not None:
        if not name.strip():
            log.debug(f"Ignoring blank name for project {project.id}")
            return project
        updates["name"] = name
    if description is not None:
        updates["description"] = description
    if not updates or all(getattr(project, k) == v for k, v in updates.items()):
        return project
    return project.model_copy(update=updates)
