"""Messages that flow through the dashboard's event queue, and watcher requests."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

from kubedash.tui.event import UserInput


class ViewId(str, enum.Enum):
    """Every widget and popup the dashboard builds."""

    PODS = "pods"
    LOGS = "logs"
    CONFIGS = "configs"
    RAW = "raw"
    EVENTS = "events"
    YAML = "yaml"
    NAMESPACES = "namespaces"
    CONTEXTS = "contexts"
    YAML_KINDS = "yaml_kinds"
    YAML_NAMES = "yaml_names"


# ---------------------------------------------------------------------------
# Resource events (watcher -> UI)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class TableSnapshot:
    target: ViewId
    header: list[str]
    rows: list[list[str]]


@dataclass(frozen=True)
class LogLines:
    """New log output; ``reset`` starts a fresh stream."""

    target: ViewId
    lines: list[str]
    reset: bool = False


@dataclass(frozen=True)
class TextSnapshot:
    target: ViewId
    lines: list[str]


@dataclass(frozen=True)
class ResourceError:
    target: ViewId
    message: str


@dataclass(frozen=True)
class NamespacesResponse:
    names: list[str]


@dataclass(frozen=True)
class ContextsResponse:
    names: list[str]
    current: str | None = None


@dataclass(frozen=True)
class ChoicesResponse:
    """Items for a selector popup, e.g. resource kinds or names."""

    target: ViewId
    names: list[str]


ResourceEvent = Union[
    TableSnapshot,
    LogLines,
    TextSnapshot,
    ResourceError,
    NamespacesResponse,
    ContextsResponse,
    ChoicesResponse,
]

Message = Union[UserInput, Tick, ResourceEvent]


# ---------------------------------------------------------------------------
# Requests (UI -> watcher)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogRequest:
    namespace: str
    pod: str


@dataclass(frozen=True)
class RawRequest:
    namespace: str
    name: str


@dataclass(frozen=True)
class NamespacesRequest:
    pass


@dataclass(frozen=True)
class ContextsRequest:
    pass


@dataclass(frozen=True)
class KindsRequest:
    """List the resource kinds that support ``get``."""


@dataclass(frozen=True)
class YamlNamesRequest:
    kind: str


@dataclass(frozen=True)
class YamlRequest:
    kind: str
    namespace: str
    name: str


@dataclass(frozen=True)
class RefreshRequest:
    """Poll every resource now instead of waiting for the next interval."""

    targets: list[ViewId] = field(default_factory=list)


Request = Union[
    LogRequest,
    RawRequest,
    NamespacesRequest,
    ContextsRequest,
    KindsRequest,
    YamlNamesRequest,
    YamlRequest,
    RefreshRequest,
]
