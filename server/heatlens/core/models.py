"""HeatLens core internal data models.

These are plain dataclasses with no framework dependencies.
JSON payloads are converted to/from these at the API boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from heatlens.core.errors import MalformedDataset

KIND_CLICK = "click"
KIND_MOVE = "move"
KIND_SCROLL = "scroll"

HEATMAP_TYPES = (KIND_CLICK, KIND_MOVE, KIND_SCROLL)
POINT_TYPES = (KIND_CLICK, KIND_MOVE)
DEVICE_CLASSES = ("desktop", "tablet", "mobile")

# Date windows offered by the viewer.
ALLOWED_DAYS = (1, 7, 30, 90)

_DAY_MS = 86_400_000


@dataclass(frozen=True)
class RawSample:
    kind: str
    x: float
    y: float
    viewport_width: float
    viewport_height: float
    session_id: str
    page_url: str
    device_class: str
    timestamp_ms: int
    site_id: int = 0


@dataclass(frozen=True)
class NormalizedPoint:
    """A sample's position in the shared reference space."""
    kind: str
    x: float
    y: float
    session_id: str
    site_id: int
    page_url: str
    device_class: str
    timestamp_ms: int
    clamped: bool = False


@dataclass(frozen=True)
class HeatmapPoint:
    x: float
    y: float
    value: int
    width: float | None = None

    def to_dict(self) -> dict:
        data = {"x": self.x, "y": self.y, "value": self.value}
        if self.width is not None:
            data["width"] = self.width
        return data


@dataclass(frozen=True)
class HeatmapQuery:
    """Immutable viewer selection: which partition to show."""
    site_id: int
    page_url: str = "/"
    heatmap_type: str = KIND_CLICK
    device_type: str = "desktop"
    days: int = 7

    def __post_init__(self) -> None:
        if self.heatmap_type not in HEATMAP_TYPES:
            raise ValueError(f"unknown heatmap type {self.heatmap_type!r}")
        if self.device_type not in DEVICE_CLASSES:
            raise ValueError(f"unknown device type {self.device_type!r}")
        if self.days not in ALLOWED_DAYS:
            raise ValueError(f"days must be one of {ALLOWED_DAYS}, got {self.days}")

    def partition(self, now_ms: int) -> PartitionKey:
        """Resolve the day window against a fixed 'now'."""
        return PartitionKey(
            site_id=self.site_id,
            page_url=self.page_url,
            heatmap_type=self.heatmap_type,
            device_type=self.device_type,
            since_ms=now_ms - self.days * _DAY_MS,
            until_ms=now_ms,
        )


@dataclass(frozen=True)
class PartitionKey:
    site_id: int
    page_url: str
    heatmap_type: str
    device_type: str
    since_ms: int
    until_ms: int

    def matches(self, point: NormalizedPoint) -> bool:
        return (
            point.site_id == self.site_id
            and point.page_url == self.page_url
            and point.kind == self.heatmap_type
            and point.device_class == self.device_type
            and self.since_ms <= point.timestamp_ms <= self.until_ms
        )


@dataclass(frozen=True)
class HeatmapDataset:
    """The aggregated, renderable unit for one partition.

    Construction checks the invariants the renderer relies on and raises
    MalformedDataset when they do not hold.
    """
    site_id: int
    page_url: str
    heatmap_type: str
    device_type: str
    points: tuple[HeatmapPoint, ...] = ()
    max: int = 0
    session_count: int = 0
    total_events: int = 0
    available_pages: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        check_dataset(self)

    @property
    def is_empty(self) -> bool:
        return not self.points

    def to_dict(self) -> dict:
        return {
            "site_id": self.site_id,
            "page_url": self.page_url,
            "heatmap_type": self.heatmap_type,
            "device_type": self.device_type,
            "data": [p.to_dict() for p in self.points],
            "max": self.max,
            "session_count": self.session_count,
            "total_events": self.total_events,
            "available_pages": list(self.available_pages),
        }

    @classmethod
    def from_dict(cls, data: dict) -> HeatmapDataset:
        """Parse the query-service wire format.

        Missing or mistyped fields raise MalformedDataset: a partially
        received dataset must never reach the renderer.
        """
        try:
            points = tuple(
                HeatmapPoint(
                    x=float(p["x"]),
                    y=float(p["y"]),
                    value=p["value"],
                    width=float(p["width"]) if p.get("width") is not None else None,
                )
                for p in data["data"]
            )
            return cls(
                site_id=int(data["site_id"]),
                page_url=str(data["page_url"]),
                heatmap_type=str(data["heatmap_type"]),
                device_type=str(data["device_type"]),
                points=points,
                max=data["max"],
                session_count=int(data["session_count"]),
                total_events=int(data["total_events"]),
                available_pages=tuple(data.get("available_pages", [])),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedDataset(f"cannot parse dataset: {exc}") from exc


def check_dataset(dataset: HeatmapDataset) -> None:
    """Raise MalformedDataset if the dataset violates its invariants."""
    if dataset.heatmap_type not in HEATMAP_TYPES:
        raise MalformedDataset(f"unknown heatmap type {dataset.heatmap_type!r}")
    if dataset.max < 0 or dataset.session_count < 0 or dataset.total_events < 0:
        raise MalformedDataset("max, session_count and total_events must be >= 0")
    if not dataset.points:
        if dataset.max != 0:
            raise MalformedDataset(f"empty dataset with max={dataset.max}")
        return
    if dataset.max == 0:
        raise MalformedDataset(f"max=0 with {len(dataset.points)} points")
    if dataset.session_count < 1:
        raise MalformedDataset("non-empty dataset without contributing sessions")
    for p in dataset.points:
        if not 0 <= p.value <= dataset.max:
            raise MalformedDataset(f"point value {p.value} outside [0, {dataset.max}]")
