"""
Image-to-draft boundary.

The hosted vision model is an external collaborator; this module defines the
analyzer interface, the JSON schema a model answer has to satisfy, and the
parsing that turns an answer into a ProjectDraft.
"""
import abc
import json
import re
from pathlib import Path
from typing import Any, Dict, Sequence, Union

from jsonschema import validate, ValidationError, SchemaError
from pydantic import ValidationError as ModelValidationError

from .logs import get_logger
from .models import ImageInput, ProjectDraft
from .recovery import IngestionError

log = get_logger("analyzer")

_DRAFT_CARD_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "storyPoints": {"type": ["integer", "number", "string"]},
        "tags": {"type": "array", "items": {"type": "string"}},
        "tasks": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["title", "description", "tasks", "storyPoints"],
}

DRAFT_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "projectName": {"type": "string"},
        "projectDescription": {"type": "string"},
        "backlogCards": {"type": "array", "items": _DRAFT_CARD_SCHEMA},
        "sprints": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "cards": {"type": "array", "items": _DRAFT_CARD_SCHEMA},
                },
                "required": ["name", "cards"],
            },
        },
    },
    "required": ["projectName", "projectDescription", "backlogCards", "sprints"],
}

def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = re.sub(r'^```(?:json)?\s*', '', text)
        text = re.sub(r'\s*```$', '', text)
    return text

def parse_draft(payload: Union[str, bytes, Dict[str, Any]]) -> ProjectDraft:
    """
    Validate a model answer and turn it into a ProjectDraft.

    Args:
        payload: The raw answer text (markdown fences allowed) or an already decoded dict

    Returns:
        The parsed draft

    Raises:
        IngestionError: If the answer is not JSON or does not have the draft shape
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise IngestionError(f"Analyzer answer is not UTF-8 text: {e}") from e
    if isinstance(payload, str):
        if not payload.strip():
            raise IngestionError("Empty answer from the analyzer")
        try:
            payload = json.loads(_strip_fences(payload))
        except json.JSONDecodeError as e:
            raise IngestionError(f"Analyzer answer is not valid JSON: {e}") from e

    try:
        validate(instance=payload, schema=DRAFT_SCHEMA)
    except ValidationError as e:
        log.error(f"Draft FAILED schema validation: {e.message}")
        raise IngestionError(f"Draft does not match the expected structure: {e.message}") from e
    except SchemaError as e:
        log.critical(f"Draft schema itself is invalid: {e.message}")
        raise IngestionError(f"Draft schema is invalid: {e.message}") from e

    try:
        return ProjectDraft.model_validate(payload)
    except ModelValidationError as e:
        raise IngestionError(f"Draft contains invalid values: {e}") from e

class DraftAnalyzer(abc.ABC):
    """
    An abstract base class for image analyzers.

    Concrete analyzers turn one or more images of the same project into a
    ProjectDraft, raising IngestionError when they cannot.
    """

    @abc.abstractmethod
    def analyze(self, images: Sequence[ImageInput]) -> ProjectDraft:
        pass

class JsonFileAnalyzer(DraftAnalyzer):
    """Replays a model answer captured to disk, ignoring the images themselves."""

    def __init__(self, path: Union[Path, str]):
        self.path = Path(path)

    def analyze(self, images: Sequence[ImageInput]) -> ProjectDraft:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (IOError, OSError) as e:
            raise IngestionError(f"Cannot read draft {self.path}: {e}") from e
        log.debug(f"Replaying draft from {self.path} for {len(images)} image(s)")
        return parse_draft(text)
