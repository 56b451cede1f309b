"""Unit tests for the board session and open-card reconciliation."""

from visionscrum.engine import find_card
from visionscrum.view import BoardSession, reconcile


class TestReconcile:
    """Test re-deriving the open card from a snapshot."""

    def test_nothing_open(self, project):
        """Test no open card stays closed."""
        assert reconcile(project, None) is None

    def test_refreshes_from_project(self, project):
        """Test the projection takes the canonical values."""
        stale = project.backlog[0].model_copy(update={"title": "Stale"})
        assert reconcile(project, stale).title == "Login"

    def test_detached_copy(self, project):
        """Test the projection is not the card object of the project."""
        card = reconcile(project, project.backlog[0])
        assert card == project.backlog[0]
        assert card is not project.backlog[0]

    def test_gone(self, empty_project, project):
        """Test a card missing from the project closes the projection."""
        assert reconcile(empty_project, project.backlog[0]) is None


class TestBoardSession:
    """Test applying operations through a session."""

    def test_open_and_close(self, project):
        """Test opening a known and an unknown card."""
        session = BoardSession(project)
        assert session.open("c3").title == "Checkout"
        session.close()
        assert session.open_card is None
        assert session.open("nope") is None

    def test_delete_open_card_clears_projection(self, project):
        """Test deleting the open card closes it."""
        session = BoardSession(project)
        session.open("c1")
        session.delete_card("c1")
        assert session.open_card is None
        assert find_card(session.project, "c1") is None

    def test_delete_other_card_keeps_projection(self, project):
        """Test deleting another card leaves the open one alone."""
        session = BoardSession(project)
        session.open("c1")
        session.delete_card("c3")
        assert session.open_card.id == "c1"

    def test_field_update_refreshes_projection(self, project):
        """Test edits of the open card show up in it."""
        session = BoardSession(project)
        session.open("c2")
        session.update_card_fields("c2", {"title": "Products", "status": "todo"})
        assert session.open_card.title == "Products"
        assert session.open_card == find_card(session.project, "c2")

    def test_task_operations_refresh_projection(self, project):
        """Test every checklist change reaches the open card."""
        session = BoardSession(project)
        session.open("c3")

        session.add_task("c3", "Receipt")
        assert [t.content for t in session.open_card.tasks] == ["Payment", "Receipt"]

        new_id = session.open_card.tasks[-1].id
        session.toggle_task("c3", new_id)
        assert session.open_card.find_task(new_id).completed is True

        session.add_assignee("c3", new_id, "Rui")
        assert session.open_card.find_task(new_id).assignees == ["Rui"]

        session.remove_assignee("c3", "t3", "Ana")
        assert session.open_card.find_task("t3").assignees == []

        session.delete_task("c3", "t3")
        assert [t.id for t in session.open_card.tasks] == [new_id]
        assert session.open_card == find_card(session.project, "c3")

    def test_create_backlog_card_opens_it(self, project):
        """Test the new card becomes the open one."""
        session = BoardSession(project)
        card = session.create_backlog_card()
        assert session.open_card == card
        assert session.project.backlog[0].id == card.id

    def test_on_update_called_only_on_change(self, project):
        """Test the persistence callback sees each new snapshot once."""
        published = []
        session = BoardSession(project, on_update=published.append)
        session.add_task("c1", "   ")
        session.toggle_task("nope", "t1")
        assert published == []
        session.toggle_task("c1", "t1")
        assert published == [session.project]

    def test_old_snapshot_not_observed(self, project):
        """Test a holder of the previous project never sees the change."""
        session = BoardSession(project)
        held = session.project
        session.toggle_task("c1", "t2")
        assert held.backlog[0].find_task("t2").completed is False
        assert session.project.backlog[0].find_task("t2").completed is True

    def test_project_details(self, project):
        """Test renaming through the session."""
        session = BoardSession(project)
        session.update_project_details(name="Store")
        assert session.project.name == "Store"

    def test_stats(self, project):
        """Test stats follow the current snapshot."""
        session = BoardSession(project)
        session.toggle_task("c1", "t2")
        assert session.stats.completed_tasks == 2
