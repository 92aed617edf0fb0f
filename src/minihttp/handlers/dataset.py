"""
=============================================================================
CHARACTER DATASET
=============================================================================

Loads and validates the characters.json file served by the API.

=============================================================================
RECORD SCHEMA
=============================================================================

The file holds a JSON array of records:

    [
      {
        "name": "Ayla",                       string
        "level": 12,                          integer
        "health": 87.5,                       number (stored as float)
        "element": "Fire",                    string
        "skills": ["Flame Lash", "Ember"]     list of strings
      },
      ...
    ]

Unknown keys are ignored. A whole-number health (100) is accepted and
read as 100.0. A boolean is never accepted where a number is expected,
even though bool is a subclass of int in Python.

=============================================================================
ERRORS
=============================================================================

Anything wrong with the file (missing, unreadable, invalid JSON, wrong
shape) raises DatasetError. It is a ConfigurationError: the server checks
the dataset at startup and refuses to run with a broken one.

=============================================================================
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from ..config import ConfigurationError

logger = logging.getLogger(__name__)

CHARACTERS_FILE = "characters.json"


class DatasetError(ConfigurationError):
    """Raised when the dataset file is missing or malformed."""


def _require_type(
    record: Dict[str, Any],
    key: str,
    expected: Any,
    index: int,
    label: str = "",
) -> Any:
    if key not in record:
        raise DatasetError(f"Record {index}: missing field '{key}'")
    value = record[key]
    if isinstance(value, bool) or not isinstance(value, expected):
        raise DatasetError(
            f"Record {index}: field '{key}' must be {label or expected.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


@dataclass
class Character:
    """One record of the character dataset."""

    name: str
    level: int
    health: float
    element: str
    skills: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, record: Any, index: int = 0) -> "Character":
        """
        Build a Character from a decoded JSON object.

        Raises:
            DatasetError: If the record does not match the schema.
        """
        if not isinstance(record, dict):
            raise DatasetError(f"Record {index}: expected an object, got {type(record).__name__}")

        skills = _require_type(record, "skills", list, index)
        if not all(isinstance(skill, str) for skill in skills):
            raise DatasetError(f"Record {index}: every skill must be a string")

        return cls(
            name=_require_type(record, "name", str, index),
            level=_require_type(record, "level", int, index),
            health=float(_require_type(record, "health", (int, float), index, "number")),
            element=_require_type(record, "element", str, index),
            skills=list(skills),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for JSON serialization."""
        return asdict(self)


class CharacterDataset:
    """
    Reads characters.json from the dataset root.

    The file is read on every call to load(); there is no cache, so an
    edited dataset is served on the next request.
    """

    def __init__(self, root: Union[str, Path], file_name: str = CHARACTERS_FILE):
        self.root = Path(root)
        self.file_name = file_name

    @property
    def path(self) -> Path:
        """Full path of the dataset file."""
        return self.root / self.file_name

    def load(self) -> List[Character]:
        """
        Load and validate every record.

        Raises:
            DatasetError: If the file is missing, unreadable or malformed.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DatasetError(f"Cannot read dataset {self.path}: {e}") from e

        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise DatasetError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(records, list):
            raise DatasetError(f"{self.path} must contain a JSON array")

        return [Character.from_dict(record, index) for index, record in enumerate(records)]

    def check(self) -> None:
        """Startup check: load once and log how many records were found."""
        characters = self.load()
        logger.info(f"Loaded {len(characters)} characters from {self.path}")
