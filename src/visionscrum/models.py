from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Iterator, Iterable, Set
import secrets
import string

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 7

def generate_id(taken: Iterable[str] = (), prefix: str = "") -> str:
    """Mint a short random identifier that does not collide with any id in `taken`."""
    taken = set(taken)
    while True:
        candidate = prefix + "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
        if candidate not in taken:
            return candidate

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class CardStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

class BoardModel(BaseModel):
    """Base for every persisted entity: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

class Task(BoardModel):
    """A checklist item inside a card."""

    id: str = Field(description="Identifier, unique within the owning card")
    content: str = Field(description="What has to be done")
    completed: bool = Field(default=False, description="Whether the item is ticked off")
    assignees: List[str] = Field(
        default_factory=list,
        description="Names of the people working on the item, each at most once"
    )

    @field_validator('assignees')
    @classmethod
    def validate_unique_assignees(cls, v):
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate assignee in {v}")
        return v

class Card(BoardModel):
    """A user story living either in the backlog or in exactly one sprint."""

    id: str = Field(description="Identifier, unique across the whole project")
    title: str = Field(description="Short title of the story")
    description: str = Field(default="", description="Longer description of the story")
    story_points: Optional[int] = Field(default=None, ge=0, description="Estimated complexity")
    status: CardStatus = Field(default=CardStatus.TODO, description="Kanban column of the card")
    tags: List[str] = Field(default_factory=list, description="Categories such as frontend or backend")
    tasks: List[Task] = Field(default_factory=list, description="Checklist of the card")

    @field_validator('tags')
    @classmethod
    def dedupe_tags(cls, v):
        return list(dict.fromkeys(v))

    @model_validator(mode='after')
    def validate_task_ids(self):
        ids = [t.id for t in self.tasks]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate task id in card {self.id}")
        return self

    def find_task(self, task_id: str) -> Optional[Task]:
        """Find a task by id."""
        return next((t for t in self.tasks if t.id == task_id), None)

    def task_ids(self) -> Set[str]:
        return {t.id for t in self.tasks}

class Sprint(BoardModel):
    """A fixed-length iteration holding its own ordered card list."""

    id: str = Field(description="Identifier of the sprint")
    name: str = Field(description="Display name, ie. Sprint 1")
    start_date: datetime = Field(description="When the sprint starts")
    end_date: datetime = Field(description="When the sprint ends")
    is_completed: bool = Field(default=False, description="Whether the sprint has been closed")
    cards: List[Card] = Field(default_factory=list, description="Cards planned for the sprint")

    @model_validator(mode='after')
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be after start_date")
        return self

class Project(BoardModel):
    """Root of ownership and unit of persistence."""

    id: str = Field(description="Identifier of the project")
    name: str = Field(description="Project name")
    description: str = Field(default="", description="What the project is about")
    created_at: datetime = Field(default_factory=utcnow, description="When the project was created")
    total_hours: Optional[float] = Field(default=None, gt=0, description="Budgeted hours for the project")
    backlog: List[Card] = Field(default_factory=list, description="Cards not planned into a sprint")
    sprints: List[Sprint] = Field(default_factory=list, description="Sprints in their fixed order")

    @model_validator(mode='after')
    def validate_card_ids(self):
        seen = set()
        for card in self.iter_cards():
            if card.id in seen:
                raise ValueError(f"Card id {card.id} appears more than once in project {self.id}")
            seen.add(card.id)
        return self

    def iter_cards(self) -> Iterator[Card]:
        """Yield every card, backlog first, then each sprint in order."""
        yield from self.backlog
        for sprint in self.sprints:
            yield from sprint.cards

    def card_ids(self) -> Set[str]:
        return {c.id for c in self.iter_cards()}

class CardUpdate(BaseModel):
    """The subset of card fields a user may edit directly."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    story_points: Optional[int] = Field(default=None, ge=0)
    status: Optional[CardStatus] = None
    tags: Optional[List[str]] = None

class ImageInput(BaseModel):
    """One uploaded picture handed to the analyzer."""

    data: bytes = Field(description="Raw image bytes")
    mime_type: str = Field(description="Media type, ie. image/png")

    @field_validator('mime_type')
    @classmethod
    def validate_mime_type(cls, v):
        if not v.startswith("image/"):
            raise ValueError(f"Unsupported media type: {v}")
        return v

class ProjectDraft(BaseModel):
    """Project structure proposed by the image analyzer, before ids are minted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    project_name: str = Field(description="The detected project name")
    project_description: str = Field(description="A summary of the project")
    backlog_cards: List['ProjectDraft.Card'] = Field(
        default_factory=list,
        description="Items in the backlog not yet assigned to a sprint"
    )
    sprints: List['ProjectDraft.Sprint'] = Field(
        default_factory=list,
        description="Proposed sprints, 15 days each"
    )

    class Card(BaseModel):
        model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

        title: str
        description: str
        story_points: int = Field(ge=0)
        tags: Optional[List[str]] = None
        tasks: List[str] = Field(default_factory=list)

        @field_validator('story_points', mode='before')
        @classmethod
        def coerce_story_points(cls, v):
            # models sometimes answer "5" or 5.0
            try:
                return int(float(v))
            except (TypeError, ValueError, OverflowError):
                raise ValueError(f"storyPoints is not a number: {v!r}")

    class Sprint(BaseModel):
        name: str
        cards: List['ProjectDraft.Card'] = Field(default_factory=list)

ProjectDraft.Sprint.model_rebuild()
ProjectDraft.model_rebuild()
