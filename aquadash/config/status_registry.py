import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

# Folder of this file: aquadash/config
CONFIG_DIR = Path(__file__).parent

# aquadash/config/statuses.json
STATUS_FILE = CONFIG_DIR / "statuses.json"


@dataclass(frozen=True)
class DisplayMetadata:
    code: str
    label: str
    color: str
    css: str
    icon: str
    order: int = 0


# Shown for anything the registry does not know
DEFAULT_COLOR = "#6b7280"
DEFAULT_CSS = "badge-gray"
DEFAULT_ICON = "help-circle"


def load_statuses() -> list[dict]:
    """
    Read statuses.json and return the status rows. Each row:
      {
        "kind": "procurement",
        "code": "ORDERED",
        "label": "Ordered",
        "color": "#1d4ed8",
        "css": "badge-blue",
        "icon": "truck",
        "order": 30
      }
    """
    with STATUS_FILE.open("r", encoding="utf-8") as f:
        data = json.load(f)

    data.sort(key=lambda s: (s["kind"], s.get("order", 0)))
    return data


STATUS_LIST: list[dict] = load_statuses()

# (kind, code) → metadata:  ("request", "PENDING") → DisplayMetadata(...)
STATUS_BY_KEY: dict[tuple[str, str], DisplayMetadata] = {
    (s["kind"], s["code"]): DisplayMetadata(
        code=s["code"],
        label=s["label"],
        color=s["color"],
        css=s["css"],
        icon=s["icon"],
        order=s.get("order", 0),
    )
    for s in STATUS_LIST
}


def _code(status: Any) -> str:
    if isinstance(status, Enum):
        return str(status.value)
    return "" if status is None else str(status)


def display_for(kind: str, status: Any) -> DisplayMetadata:
    """
    Status of a given kind → badge metadata.
    Unknown statuses get a neutral badge labelled with the raw code.
    """
    code = _code(status)
    meta = STATUS_BY_KEY.get((kind, code))
    if meta:
        return meta
    label = code.replace("_", " ").capitalize() if code else "Unknown"
    return DisplayMetadata(code=code, label=label, color=DEFAULT_COLOR, css=DEFAULT_CSS, icon=DEFAULT_ICON)


def badge_css(kind: str, status: Any) -> str:
    return display_for(kind, status).css


def statuses_for(kind: str) -> list[DisplayMetadata]:
    """All statuses of a kind in display order - for filter dropdowns."""
    return sorted(
        (m for (k, _), m in STATUS_BY_KEY.items() if k == kind),
        key=lambda m: m.order,
    )


def kinds() -> list[str]:
    return sorted({s["kind"] for s in STATUS_LIST})
