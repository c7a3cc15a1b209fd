from typing import Dict, List, Literal, Optional, TypedDict, Union

Number = Union[int, float]

ORIGIN_IMPORTED = "imported"
ORIGIN_USER = "user-created"


class PositionDescriptor(TypedDict, total=False):
    page_number: int     # 1-based
    x: Number
    y: Number
    left: Number         # wins over x when present
    top: Number          # wins over y when present
    width: Number
    height: Number


class Position(TypedDict):
    left: float          # percent of page width
    top: float           # percent of page height
    width: float
    height: float


class CanonicalPosition(Position):
    page_index: int      # 0-based


class CanonicalHighlight(TypedDict):
    id: str
    page_index: int
    position: Position
    color: str
    label: str
    note: str
    origin: Literal["imported", "user-created"]


class Viewport(TypedDict):
    page_index: int
    width: float         # pixels at scale 1.0
    height: float


class RenderedRect(TypedDict):
    left: float
    top: float
    width: float
    height: float


class Point(TypedDict):
    left: float
    top: float


class ExportedPosition(TypedDict):
    page_number: int
    left: float          # fraction of page width
    top: float
    width: float
    height: float


class ExportedHighlight(TypedDict):
    id: str
    position: ExportedPosition


class ExtractionReport(TypedDict, total=False):
    container: Optional[str]
    skipped: List[str]
    invalid: List[Dict[str, str]]   # [{"field": ..., "key": ..., "error": ...}]
