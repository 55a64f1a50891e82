from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from pathlib import PurePosixPath
from typing import Any

from site_checklist.decoder import extract_metadata
from site_checklist.errors import UnreadableSheetError
from site_checklist.shared import ProjectMetadata

UPLOAD_DIR = "/uploads"
PLACEHOLDERS = {
    "location": "Location TBD",
    "general_manager": "Manager TBD",
    "inspector": "Inspector TBD",
}
RECORD_KEYS = {
    "id": "id",
    "project_name": "projectName",
    "location": "location",
    "general_manager": "generalManager",
    "inspector": "inspector",
    "inspection_date": "inspectionDate",
    "file_path": "filePath",
    "upload_date": "uploadDate",
    "last_modified": "lastModified",
}


@dataclass(frozen=True)
class ProjectRecord:
    """One entry of the project list kept by the surrounding application."""

    id: int
    project_name: str
    location: str
    general_manager: str
    inspector: str
    inspection_date: str
    file_path: str
    upload_date: str
    last_modified: str

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, name) for name, key in RECORD_KEYS.items()}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ProjectRecord:
        return cls(**{name: payload.get(key, "") for name, key in RECORD_KEYS.items()})

    @classmethod
    def from_upload(
        cls,
        file_name: str,
        cells: list[list] | None,
        *,
        record_id: int,
        today: date | None = None,
    ) -> ProjectRecord:
        """Build a record for a newly stored checklist file.

        Project details come from the sheet where present; an unreadable sheet
        or a bad date never blocks the upload, the fields just stay as
        placeholders (the date stays empty).
        """
        safe_name = file_name.replace(" ", "_")
        stem = PurePosixPath(safe_name).stem
        stamp = (today or date.today()).isoformat()
        metadata = ProjectMetadata()
        if cells is not None:
            try:
                metadata = extract_metadata(cells, strict=False, today=today)
            except (IndexError, TypeError, UnreadableSheetError):
                metadata = ProjectMetadata()
        return cls(
            id=record_id,
            project_name=metadata.project_name or stem,
            location=metadata.location or PLACEHOLDERS["location"],
            general_manager=metadata.general_manager or PLACEHOLDERS["general_manager"],
            inspector=metadata.inspector or PLACEHOLDERS["inspector"],
            inspection_date=metadata.inspection_date,
            file_path=f"{UPLOAD_DIR}/{safe_name}",
            upload_date=stamp,
            last_modified=stamp,
        )

    def with_metadata(self, metadata: ProjectMetadata, *, today: date | None = None) -> ProjectRecord:
        return replace(
            self,
            project_name=metadata.project_name,
            location=metadata.location,
            general_manager=metadata.general_manager,
            inspector=metadata.inspector,
            inspection_date=metadata.inspection_date,
            last_modified=(today or date.today()).isoformat(),
        )
