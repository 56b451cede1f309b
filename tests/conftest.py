import os
import tempfile
from datetime import datetime, timezone

import pytest

# CLI tests attach the package log file; keep it out of the home directory
os.environ.setdefault("VISIONSCRUM_LOG_DIR", tempfile.mkdtemp(prefix="visionscrum-logs-"))

from visionscrum.models import Card, CardStatus, Project, Sprint, Task

REFERENCE = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def reference_instant():
    return REFERENCE


@pytest.fixture
def empty_project():
    return Project(id="empty", name="Empty", description="", created_at=REFERENCE)


@pytest.fixture
def project():
    """Backlog card with two tasks, one sprint card done, one sprint card with an assignee."""
    return Project(
        id="p1",
        name="Shop",
        description="Online shop",
        created_at=REFERENCE,
        total_hours=40,
        backlog=[
            Card(
                id="c1",
                title="Login",
                description="Users can log in",
                story_points=5,
                tags=["auth"],
                tasks=[
                    Task(id="t1", content="Form", completed=True),
                    Task(id="t2", content="Session"),
                ],
            ),
        ],
        sprints=[
            Sprint(
                id="s1",
                name="Sprint 1",
                start_date=REFERENCE,
                end_date=datetime(2025, 3, 16, 9, 0, tzinfo=timezone.utc),
                cards=[
                    Card(id="c2", title="Catalog", story_points=3, status=CardStatus.DONE),
                ],
            ),
            Sprint(
                id="s2",
                name="Sprint 2",
                start_date=datetime(2025, 3, 16, 9, 0, tzinfo=timezone.utc),
                end_date=datetime(2025, 3, 31, 9, 0, tzinfo=timezone.utc),
                cards=[
                    Card(
                        id="c3",
                        title="Checkout",
                        story_points=8,
                        status=CardStatus.IN_PROGRESS,
                        tasks=[Task(id="t3", content="Payment", assignees=["Ana"])],
                    ),
                    Card(id="c4", title="Invoices"),
                ],
            ),
        ],
    )


@pytest.fixture
def draft_payload():
    return {
        "projectName": "Shop",
        "projectDescription": "Online shop",
        "backlogCards": [
            {"title": "Login", "description": "Users log in", "storyPoints": 3,
             "tags": ["auth"], "tasks": ["Form", "Session"]},
        ],
        "sprints": [
            {"name": "Sprint 1", "cards": [
                {"title": "Catalog", "description": "List products", "storyPoints": "5", "tasks": ["Grid"]},
            ]},
            {"name": "Sprint 2", "cards": [
                {"title": "Checkout", "description": "Pay", "storyPoints": 8, "tasks": []},
            ]},
        ],
    }
