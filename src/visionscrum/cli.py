"""
Command Line Interface for VisionScrum.
"""

import click
import logging
import mimetypes
import sys
from pathlib import Path
from .version import VERSION
from .analyzer import JsonFileAnalyzer, parse_draft
from .data import DataCore, DATA_JSON, DATA_YAML
from .ingest import build_project, ingest_images, DEFAULT_TOTAL_HOURS
from .models import Card, CardStatus, ImageInput
from .logs import setup_logging
from .recovery import VisionScrumError
from .engine import find_card
from .stats import card_assignees, card_progress, compute_stats, project_summary, sprint_columns


def _fail(message):
    click.echo(f"❌ {message}")
    sys.exit(1)


def _echo_card(card: Card, indent: str = "   "):
    done, total = card_progress(card)
    points = f" ({card.story_points} pts)" if card.story_points is not None else ""
    tags = f" #{' #'.join(card.tags)}" if card.tags else ""
    click.echo(f"{indent}🗂️  [{card.id}] {card.title}{points} - {card.status.value} - {done}/{total}{tags}")
    people = card_assignees(card)
    if people:
        click.echo(f"{indent}   👥 {', '.join(people)}")


def _apply(project_id, action, *args, **kwargs):
    """Open the board, run one session method and return the session."""
    try:
        with DataCore.open_board(project_id) as session:
            before = session.project
            getattr(session, action)(*args, **kwargs)
            return session, session.project is not before
    except VisionScrumError as e:
        _fail(str(e))


@click.group()
@click.version_option(version=VERSION, prog_name="vscrum")
@click.option('--debug', is_flag=True, help='Print debug messages to the console')
def main(debug):
    """
    VisionScrum - Agile boards from whiteboard photographs.

    Import the draft produced by the image analysis, then manage backlog,
    sprints, cards and checklists.
    """
    setup_logging(level=logging.DEBUG if debug else None)


@main.command(name="import")
@click.argument('draft_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('images', nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--hours', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_TOTAL_HOURS,
              show_default=True, help='Hour budget of the project')
def import_project(draft_file, images, hours):
    """Create a project from a captured analyzer answer (DRAFT_FILE)."""
    try:
        if images:
            inputs = []
            for image in images:
                mime_type = mimetypes.guess_type(image.name)[0] or "application/octet-stream"
                inputs.append(ImageInput(data=image.read_bytes(), mime_type=mime_type))
            project = ingest_images(JsonFileAnalyzer(draft_file), inputs, total_hours=hours)
        else:
            project = build_project(parse_draft(draft_file.read_text(encoding="utf-8")), total_hours=hours)
        DataCore.store().save(project)
    except (VisionScrumError, ValueError) as e:
        _fail(f"Import failed: {e}")

    click.echo(f"✅ Created project '{project.name}' ({project.id})")
    click.echo(f"   📋 Backlog: {len(project.backlog)} cards")
    click.echo(f"   📅 Sprints: {len(project.sprints)}")


@main.command(name="list")
def list_projects():
    """List stored projects."""
    try:
        projects = DataCore.store().list_projects()
    except VisionScrumError as e:
        _fail(str(e))

    if not projects:
        click.echo("📭 No projects found")
        click.echo("💡 Run 'vscrum import DRAFT_FILE' to create one")
        return

    for project in projects:
        summary = project_summary(project)
        click.echo(f"📁 {summary.name} ({summary.id})")
        click.echo(f"   📅 Created: {summary.created_at:%Y-%m-%d}  🏃 {summary.sprint_count} Sprints")
        if summary.total_hours:
            click.echo(f"   ⏱️  Budget: {summary.total_hours:g}h")


@main.command()
@click.argument('project_id')
def show(project_id):
    """Show progress, backlog and sprint boards of a project."""
    try:
        project = DataCore.store().get(project_id)
    except VisionScrumError as e:
        _fail(str(e))

    stats = compute_stats(project)

    click.echo(f"📁 {project.name}")
    if project.description:
        click.echo(f"   {project.description}")
    click.echo("")
    click.echo(f"📊 Progress: {stats.percentage}% ({stats.completed_tasks}/{stats.total_tasks} tasks)")
    click.echo(f"🎯 Story points: {stats.completed_points}/{stats.total_points}")
    if stats.assignee_distribution:
        click.echo("👥 Workload:")
        for name, count in stats.assignee_distribution.items():
            click.echo(f"   {name}: {count}")

    click.echo("")
    click.echo(f"📋 Backlog ({len(project.backlog)})")
    for card in project.backlog:
        _echo_card(card)

    for sprint in project.sprints:
        click.echo("")
        state = " ✅" if sprint.is_completed else ""
        click.echo(f"🏃 {sprint.name}{state} [{sprint.start_date:%Y-%m-%d} → {sprint.end_date:%Y-%m-%d}]")
        for status, cards in sprint_columns(sprint).items():
            click.echo(f"   {status.value.upper()} ({len(cards)})")
            for card in cards:
                _echo_card(card, indent="      ")


@main.command()
@click.argument('project_id')
@click.option('--name', help='New project name')
@click.option('--description', help='New project description')
def rename(project_id, name, description):
    """Change the name or description of a project."""
    if name is None and description is None:
        _fail("Nothing to change, pass --name and/or --description")
    _, changed = _apply(project_id, "update_project_details", name=name, description=description)
    click.echo("✅ Project updated" if changed else "📭 Nothing changed")


@main.command()
@click.argument('project_id')
@click.argument('out', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--format', 'fmt', type=click.Choice(['json', 'yaml']), default='json', show_default=True)
def export(project_id, out, fmt):
    """Write a copy of a project to OUT."""
    try:
        DataCore.store().export(project_id, out, DATA_YAML if fmt == 'yaml' else DATA_JSON)
    except VisionScrumError as e:
        _fail(str(e))
    click.echo(f"✅ Exported to {out}")


@main.command()
@click.argument('project_id')
@click.confirmation_option(prompt='Are you sure you want to delete this project?')
def delete(project_id):
    """Delete a stored project."""
    try:
        deleted = DataCore.store().delete(project_id)
    except VisionScrumError as e:
        _fail(str(e))
    if not deleted:
        _fail(f"No project with id {project_id}")
    click.echo("🗑️  Project deleted")


@main.group()
def card():
    """Manage cards."""
    pass


@card.command(name="add")
@click.argument('project_id')
def card_add(project_id):
    """Add a new card at the top of the backlog."""
    session, _ = _apply(project_id, "create_backlog_card")
    click.echo(f"✅ Created card {session.open_card.id}")


@card.command(name="delete")
@click.argument('project_id')
@click.argument('card_id')
@click.confirmation_option(prompt='Are you sure you want to delete this card and all its tasks?')
def card_delete(project_id, card_id):
    """Delete a card from the backlog or its sprint."""
    _, changed = _apply(project_id, "delete_card", card_id)
    if not changed:
        _fail(f"No card {card_id}")
    click.echo(f"🗑️  Deleted card {card_id}")


@card.command(name="update")
@click.argument('project_id')
@click.argument('card_id')
@click.option('--title', help='Card title')
@click.option('--description', help='Card description')
@click.option('--points', type=click.IntRange(min=0), help='Story points')
@click.option('--status', type=click.Choice([s.value for s in CardStatus]), help='Kanban column')
@click.option('--tag', 'tags', multiple=True, help='Tag, repeat to set several (replaces existing tags)')
def card_update(project_id, card_id, title, description, points, status, tags):
    """Edit the fields of a card."""
    fields = {}
    if title is not None:
        fields["title"] = title
    if description is not None:
        fields["description"] = description
    if points is not None:
        fields["story_points"] = points
    if status is not None:
        fields["status"] = status
    if tags:
        fields["tags"] = list(tags)
    if not fields:
        _fail("Nothing to change")
    _, changed = _apply(project_id, "update_card_fields", card_id, fields)
    click.echo(f"✅ Updated card {card_id}" if changed else f"📭 Card {card_id} unchanged")


@main.group()
def task():
    """Manage the checklist of a card."""
    pass


@task.command(name="add")
@click.argument('project_id')
@click.argument('card_id')
@click.argument('content')
def task_add(project_id, card_id, content):
    """Append a checklist item to a card."""
    session, changed = _apply(project_id, "add_task", card_id, content)
    if not changed:
        _fail(f"Task not added to card {card_id}")
    added = find_card(session.project, card_id).tasks[-1]
    click.echo(f"✅ Added task {added.id}")


@task.command(name="delete")
@click.argument('project_id')
@click.argument('card_id')
@click.argument('task_id')
def task_delete(project_id, card_id, task_id):
    """Remove a checklist item."""
    _, changed = _apply(project_id, "delete_task", card_id, task_id)
    if not changed:
        _fail(f"No task {task_id} in card {card_id}")
    click.echo(f"🗑️  Deleted task {task_id}")


@task.command(name="toggle")
@click.argument('project_id')
@click.argument('card_id')
@click.argument('task_id')
def task_toggle(project_id, card_id, task_id):
    """Tick or untick a checklist item."""
    _, changed = _apply(project_id, "toggle_task", card_id, task_id)
    if not changed:
        _fail(f"No task {task_id} in card {card_id}")
    click.echo(f"✅ Toggled task {task_id}")


@main.command()
@click.argument('project_id')
@click.argument('card_id')
@click.argument('task_id')
@click.argument('name')
def assign(project_id, card_id, task_id, name):
    """Add NAME to the people on a task."""
    _, changed = _apply(project_id, "add_assignee", card_id, task_id, name)
    click.echo(f"✅ {name} assigned" if changed else f"📭 {name} not assigned")


@main.command()
@click.argument('project_id')
@click.argument('card_id')
@click.argument('task_id')
@click.argument('name')
def unassign(project_id, card_id, task_id, name):
    """Remove NAME from the people on a task."""
    _, changed = _apply(project_id, "remove_assignee", card_id, task_id, name)
    click.echo(f"✅ {name} unassigned" if changed else f"📭 {name} was not assigned")


if __name__ == "__main__":
    main()
