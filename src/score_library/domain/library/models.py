"""
Music library domain models.

Composers own works (sheet music) and recordings. The same shapes are used
for rows of the local store and of the remote catalog; which store a row
came from is tracked by the caller, never guessed from field contents.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional


@dataclass
class Work:
    """A piece of sheet music belonging to one composer."""

    id: str
    composer_id: str  # Only meaningful inside the store holding this row
    title: str
    edition: str = ""
    year: str = ""
    file_url: str = ""  # Asset reference: local path or remote URL


@dataclass
class Recording:
    """A performance recording belonging to one composer."""

    id: str
    composer_id: str
    title: str
    performer: str = ""
    duration: str = ""
    year: str = ""
    file_url: str = ""


@dataclass
class Composer:
    """A composer with optional avatar and owned works/recordings.

    ``works`` and ``recordings`` are only populated by
    ``get_composer_with_children``; listings fill the counts instead.
    """

    id: str
    name: str
    period: str = ""
    image: str = ""  # Asset reference: local path or remote URL
    works: List[Work] = field(default_factory=list)
    recordings: List[Recording] = field(default_factory=list)
    sheet_music_count: int = 0
    recording_count: int = 0


class AssetKind(Enum):
    """Which store an asset reference is valid in."""

    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class AssetRef:
    """Asset reference tagged with the store it belongs to."""

    kind: AssetKind
    value: str

    @classmethod
    def local(cls, value: str) -> "AssetRef":
        return cls(AssetKind.LOCAL, value or "")

    @classmethod
    def remote(cls, value: str) -> "AssetRef":
        return cls(AssetKind.REMOTE, value or "")

    @property
    def is_empty(self) -> bool:
        return not self.value


class EntityUpdate:
    """Base for partial updates: ``None`` means "leave unchanged"."""

    def changes(self) -> Dict[str, str]:
        """Column -> new value for every field that was set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass
class ComposerUpdate(EntityUpdate):
    name: Optional[str] = None
    period: Optional[str] = None
    image: Optional[str] = None


@dataclass
class WorkUpdate(EntityUpdate):
    title: Optional[str] = None
    edition: Optional[str] = None
    year: Optional[str] = None
    file_url: Optional[str] = None


@dataclass
class RecordingUpdate(EntityUpdate):
    title: Optional[str] = None
    performer: Optional[str] = None
    duration: Optional[str] = None
    year: Optional[str] = None
    file_url: Optional[str] = None
