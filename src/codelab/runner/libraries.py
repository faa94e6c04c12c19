"""Library listing shared by the sandbox endpoint and the activity client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LibraryInfo(BaseModel):
    """One bundled jar, as listed by ``GET /api/libraries``."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str = ""
    name: str
    version: str = ""
