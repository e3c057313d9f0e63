from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

SNAPSHOT_FILENAME = "browser-snapshot.png"


class PageContext(BaseModel):
    """What the page says: its title and a normalized excerpt of the body text."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    snippet: Optional[str] = None


class SnapshotResult(BaseModel):
    """A point-in-time observation of the active surface, or the reason there is none."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    image: Optional[bytes] = Field(default=None, description="PNG bytes of the visible surface.")
    url: Optional[str] = None
    title: Optional[str] = None
    viewport_width: Optional[float] = Field(default=None, alias="viewportWidth")
    viewport_height: Optional[float] = Field(default=None, alias="viewportHeight")
    text_snippet: Optional[str] = Field(default=None, alias="textSnippet")
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> "SnapshotResult":
        return cls(error=message)
