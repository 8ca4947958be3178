"""External artifacts staged onto the local filesystem."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, model_validator


class ArtifactKind(str, Enum):
    ARCHIVE = "archive"
    REPOSITORY = "repository"


class Artifact(BaseModel):
    """A named external dependency and where it must end up.

    ``expected_path`` doubles as the presence predicate: the artifact counts
    as provisioned when that path exists. For archives, the archive must
    unpack to a top-level entry named like ``expected_path``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ArtifactKind
    locator: str
    expected_path: Path
    branch: str | None = None  # repository only
    archive_name: str | None = None  # archive only
    refresh: bool = False  # remove and fetch again even when present

    @model_validator(mode="after")
    def _check_kind_fields(self) -> Artifact:
        if self.kind == ArtifactKind.ARCHIVE and not self.archive_name:
            raise ValueError(f"archive artifact {self.name!r} needs archive_name")
        if self.kind == ArtifactKind.REPOSITORY and not self.branch:
            raise ValueError(f"repository artifact {self.name!r} needs branch")
        return self

    @property
    def staging_path(self) -> Path:
        """Sibling directory the artifact is fetched into before the rename."""
        return self.expected_path.parent / f".{self.expected_path.name}.partial"


def is_already_provisioned(artifact: Artifact) -> bool:
    """Presence check used as the only idempotence guard."""
    return artifact.expected_path.exists()
