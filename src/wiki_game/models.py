from typing import List, Optional, Set, Union
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

ROUTE_KEY_SEPARATOR = "::"
PATH_SEPARATOR = " -> "


def route_id(origin: str, target: str) -> str:
    """Key of the Route record for an (origin, target) pair."""
    return f"{origin}{ROUTE_KEY_SEPARATOR}{target}"


def format_path(path: List[str]) -> str:
    """Human-readable rendering of a path, e.g. 'a -> b -> c'."""
    return PATH_SEPARATOR.join(path)

# --- Enums ---

class RecordKind(Enum):
    """The two independent key spaces of the memo store."""
    DOCUMENT = "document"
    ROUTE = "route"

class Outcome(Enum):
    """What the worker decided to do with a single message."""
    INVALID = "invalid"
    CACHED = "cached"
    CACHED_DROPPED = "cached_dropped"
    FOUND = "found"
    DEPTH_EXHAUSTED = "depth_exhausted"
    DIRECT_HIT = "direct_hit"
    EXPANDED = "expanded"

# --- Records ---

class Document(BaseModel):
    """A fetched document and the canonical links discovered on it."""
    id: str = Field(..., min_length=1, description="Canonical URL of the document")
    links: Set[str] = Field(default_factory=set, description="Canonical same-site URLs linked from the document")

    @field_serializer("links")
    def _serialize_links(self, links: Set[str]) -> List[str]:
        return sorted(links)

class Route(BaseModel):
    """A solved (origin, target) pair."""
    id: str = Field(..., min_length=1, description="Route key, 'origin::target'")
    path: List[str] = Field(..., min_length=1, description="Document ids from origin to target inclusive")

    @model_validator(mode="after")
    def _path_matches_key(self) -> "Route":
        # the key names the endpoints, the path must run between them
        if self.id != route_id(self.path[0], self.path[-1]):
            raise ValueError(f"path {format_path(self.path)!r} does not connect route {self.id!r}")
        return self

    @classmethod
    def for_pair(cls, origin: str, target: str, path: List[str]) -> "Route":
        return cls(id=route_id(origin, target), path=list(path))

    @property
    def origin(self) -> str:
        return self.path[0]

    @property
    def target(self) -> str:
        return self.path[-1]

StoreRecord = Union[Document, Route]

# --- Messages ---

class WorkMessage(BaseModel):
    """
    Unit of distributed search state.

    Empty or missing fields parse to empty values so that malformed input
    reaches the worker, which decides to drop it.
    """
    origin: str = Field("", description="Document the search started from")
    target: str = Field("", description="Document the search is looking for")
    current: Optional[str] = Field(None, description="Document being processed; defaults to origin")
    depth: int = Field(0, description="Remaining hop budget")
    path: List[str] = Field(default_factory=list, description="Documents visited so far, starting with origin")

    @field_validator("origin", "target", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("path", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return [] if v is None else v

    @property
    def is_valid(self) -> bool:
        return bool(self.origin) and bool(self.target)

    @property
    def is_seed(self) -> bool:
        """A seed message carries no path before normalization."""
        return not self.path

    @property
    def route_id(self) -> str:
        return route_id(self.origin, self.target)

    def normalized(self) -> "WorkMessage":
        """Copy with `current` and `path` filled in from `origin` when unset."""
        current = self.current or self.origin
        path = list(self.path) if self.path else [self.origin]
        return self.model_copy(update={"current": current, "path": path})

    def child(self, link: str) -> "WorkMessage":
        """Frontier message one hop further along `link`."""
        return WorkMessage(
            origin=self.origin,
            target=self.target,
            current=link,
            depth=self.depth - 1,
            path=[*self.path, link],
        )

    @classmethod
    def seed(cls, origin: str, target: str, depth: int) -> "WorkMessage":
        return cls(origin=origin, target=target, depth=depth)

# --- Results ---

class FoundEvent(BaseModel):
    """Emitted when a route between origin and target is known."""
    origin: str
    target: str
    path: List[str]
    text: str = Field(..., description="Rendering of the path, 'a -> b -> c'")
    cached: bool = Field(False, description="Whether the path came from the route memo")
    timestamp: datetime = Field(default_factory=datetime.now)

class ProcessResult(BaseModel):
    """Everything a single worker invocation did."""
    outcome: Outcome
    enqueued: List[WorkMessage] = Field(default_factory=list)
    store_writes: List[StoreRecord] = Field(default_factory=list)
    notification: Optional[FoundEvent] = None
