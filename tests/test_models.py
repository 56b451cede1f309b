"""Unit tests for Pydantic models."""

import json
import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError
from visionscrum.models import (
    CardStatus, Task, Card, Sprint, Project, CardUpdate,
    ProjectDraft, ImageInput, generate_id
)


class TestGenerateId:
    """Test identifier generation."""

    def test_avoids_taken_ids(self, monkeypatch):
        """Test that a colliding candidate is retried."""
        import visionscrum.models as models
        choices = iter("aaaaaaa" + "bbbbbbb")
        monkeypatch.setattr(models.secrets, "choice", lambda alphabet: next(choices))
        assert generate_id(taken={"aaaaaaa"}) == "bbbbbbb"

    def test_prefix(self):
        """Test that the prefix is kept."""
        new_id = generate_id(prefix="card-")
        assert new_id.startswith("card-")
        assert len(new_id) == len("card-") + 7


class TestTask:
    """Test Task model."""

    def test_defaults(self):
        """Test a new task is open and unassigned."""
        task = Task(id="t1", content="Write tests")
        assert task.completed is False
        assert task.assignees == []

    def test_duplicate_assignee_rejected(self):
        """Test that a name may appear only once."""
        with pytest.raises(ValidationError, match="Duplicate assignee"):
            Task(id="t1", content="x", assignees=["Ana", "Ana"])

    def test_assignees_case_sensitive(self):
        """Test that names differing in case are distinct."""
        task = Task(id="t1", content="x", assignees=["Ana", "ana"])
        assert task.assignees == ["Ana", "ana"]

    def test_frozen(self):
        """Test that fields cannot be assigned in place."""
        task = Task(id="t1", content="x")
        with pytest.raises(ValidationError):
            task.completed = True


class TestCard:
    """Test Card model."""

    def test_defaults(self):
        """Test creating a minimal card."""
        card = Card(id="c1", title="Login")
        assert card.status == CardStatus.TODO
        assert card.story_points is None
        assert card.tags == []
        assert card.tasks == []

    def test_negative_points_rejected(self):
        """Test story points must not be negative."""
        with pytest.raises(ValidationError):
            Card(id="c1", title="Login", story_points=-1)

    def test_tags_deduplicated(self):
        """Test tags behave like an ordered set."""
        card = Card(id="c1", title="Login", tags=["api", "auth", "api"])
        assert card.tags == ["api", "auth"]

    def test_duplicate_task_ids_rejected(self):
        """Test task ids are unique within a card."""
        with pytest.raises(ValidationError, match="Duplicate task id"):
            Card(id="c1", title="Login", tasks=[Task(id="t", content="a"), Task(id="t", content="b")])

    def test_find_task(self, project):
        """Test finding a task by id."""
        card = project.backlog[0]
        assert card.find_task("t2").content == "Session"
        assert card.find_task("missing") is None

    def test_status_values(self):
        """Test status accepts the wire values."""
        assert Card(id="c", title="x", status="in-progress").status == CardStatus.IN_PROGRESS
        with pytest.raises(ValidationError):
            Card(id="c", title="x", status="doing")


class TestSprint:
    """Test Sprint model."""

    def test_date_validation(self):
        """Test end date cannot precede start date."""
        now = datetime.now(timezone.utc)
        with pytest.raises(ValidationError, match="end_date must be after start_date"):
            Sprint(id="s", name="Sprint 1", start_date=now, end_date=now - timedelta(days=1))


class TestProject:
    """Test Project model."""

    def test_iter_cards_order(self, project):
        """Test cards come backlog first, then sprints in order."""
        assert [c.id for c in project.iter_cards()] == ["c1", "c2", "c3", "c4"]

    def test_card_id_unique_across_containers(self, reference_instant):
        """Test a card id cannot be in the backlog and a sprint at once."""
        card = Card(id="dup", title="Twice")
        sprint = Sprint(id="s", name="S", start_date=reference_instant,
                        end_date=reference_instant + timedelta(days=15), cards=[card])
        with pytest.raises(ValidationError, match="appears more than once"):
            Project(id="p", name="P", backlog=[card], sprints=[sprint])

    def test_total_hours_positive(self):
        """Test the hour budget must be positive when given."""
        with pytest.raises(ValidationError):
            Project(id="p", name="P", total_hours=0)

    def test_camel_case_json(self, project):
        """Test serialization uses the board's field names."""
        data = json.loads(project.to_json())
        assert "createdAt" in data
        assert data["totalHours"] == 40
        assert data["backlog"][0]["storyPoints"] == 5
        assert data["sprints"][0]["isCompleted"] is False
        assert "startDate" in data["sprints"][0]
        assert data["sprints"][0]["cards"][0]["status"] == "done"

    def test_json_round_trip(self, project):
        """Test a dumped project loads back identical."""
        assert Project.model_validate_json(project.to_json()).to_dict() == project.to_dict()
        assert Project.model_validate(project.to_dict()).to_json() == project.to_json()


class TestCardUpdate:
    """Test the editable card subset."""

    def test_accepts_both_spellings(self):
        """Test snake_case and camelCase keys."""
        assert CardUpdate.model_validate({"storyPoints": 2}).story_points == 2
        assert CardUpdate.model_validate({"story_points": 3}).story_points == 3

    def test_ignores_other_keys(self):
        """Test id and tasks are not editable."""
        update = CardUpdate.model_validate({"id": "x", "tasks": [], "title": "New"})
        assert update.model_dump(exclude_unset=True) == {"title": "New"}


class TestImageInput:
    """Test ImageInput model."""

    def test_requires_image_type(self):
        """Test non-image media types are refused."""
        ImageInput(data=b"\x89PNG", mime_type="image/png")
        with pytest.raises(ValidationError, match="Unsupported media type"):
            ImageInput(data=b"%PDF", mime_type="application/pdf")


class TestProjectDraft:
    """Test ProjectDraft model."""

    def test_parse(self, draft_payload):
        """Test parsing the analyzer shape."""
        draft = ProjectDraft.model_validate(draft_payload)
        assert draft.project_name == "Shop"
        assert draft.backlog_cards[0].tags == ["auth"]
        assert draft.sprints[0].cards[0].tags is None
        assert len(draft.sprints) == 2

    def test_story_points_coerced(self, draft_payload):
        """Test numeric strings and floats become integers."""
        draft_payload["backlogCards"][0]["storyPoints"] = 2.0
        draft = ProjectDraft.model_validate(draft_payload)
        assert draft.backlog_cards[0].story_points == 2
        assert draft.sprints[0].cards[0].story_points == 5

    def test_story_points_not_a_number(self, draft_payload):
        """Test garbage story points are refused."""
        draft_payload["backlogCards"][0]["storyPoints"] = "many"
        with pytest.raises(ValidationError, match="storyPoints is not a number"):
            ProjectDraft.model_validate(draft_payload)

    @pytest.mark.parametrize("points", [1e400, "inf", "-Infinity", "nan"])
    def test_story_points_not_finite(self, draft_payload, points):
        """Test unbounded story points are refused like any other bad value."""
        draft_payload["backlogCards"][0]["storyPoints"] = points
        with pytest.raises(ValidationError, match="storyPoints is not a number"):
            ProjectDraft.model_validate(draft_payload)
