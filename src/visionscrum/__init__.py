"""
VisionScrum - Agile project boards generated from photographs of whiteboards and sketches.

A project holds a backlog and an ordered list of sprints:
Project → Backlog / Sprint → Card → Task
"""

from .version import VERSION
from .models import (
    CardStatus,
    Task,
    Card,
    Sprint,
    Project,
    CardUpdate,
    ProjectDraft,
    ImageInput,
    generate_id,
)
from .stats import ProjectStats, compute_stats
from .view import BoardSession
from .ingest import build_project, ingest_images
from .analyzer import DraftAnalyzer, parse_draft
from .data import DataCore, ProjectStore

__version__ = VERSION

__all__ = [
    "VERSION",
    "CardStatus",
    "Task",
    "Card",
    "Sprint",
    "Project",
    "CardUpdate",
    "ProjectDraft",
    "ImageInput",
    "generate_id",
    "ProjectStats",
    "compute_stats",
    "BoardSession",
    "build_project",
    "ingest_images",
    "DraftAnalyzer",
    "parse_draft",
    "DataCore",
    "ProjectStore",
]
