"""Deterministic event colors.

Colors are pure functions of their inputs: no random seed and no state,
so an identifier keeps its color across calls and processes.
"""

import math

from board_calendar.models.event import HolidayType

DEFAULT_COLOR = "#579bfc"
FALLBACK_EVENT_COLOR = "#3174ad"

# Vibrant colors first, neutral tail last
PALETTE = [
    "#00c875",
    "#fdab3d",
    "#df2f4a",
    "#9d50dd",
    "#579bfc",
    "#ffcb00",
    "#ff5ac4",
    "#9cd326",
    "#ff6d3b",
    "#4eccc6",
    "#bb3354",
    "#784bd1",
    "#66ccff",
    "#e50073",
    "#037f4c",
    "#cab641",
    "#5559df",
    "#ff7575",
    "#faa1f1",
    "#ffadad",
    "#216edf",
    "#bda8f9",
    "#e484bd",
    "#007eb5",
    # neutral
    "#74afcc",
    "#a1e3f6",
    "#9aadbd",
    "#a9bee8",
    "#9d99b9",
    "#7f5347",
    "#bca58a",
    "#cd9282",
    "#563e3e",
]
VIBRANT_COUNT = 24
VIBRANT_SHARE_PERCENT = 80
GOLDEN_RATIO = 0.618033988749895
DARKNESS_THRESHOLD = 150

# Fixed colors for all-day event type labels
EVENT_TYPE_COLORS = {
    "חופשה": "#fdab3d",  # vacation
    "מחלה": "#e2445c",  # sick leave
    "מילואים": "#037f4c",  # reserve duty
}

HOLIDAY_COLORS = {
    HolidayType.MODERN: "#0073ea",
    HolidayType.MAJOR: "#784bd1",
    HolidayType.MINOR: "#9cd326",
}


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def hash_identifier(identifier: str) -> int:
    """Non-negative string hash over UTF-16 code units.

    ``h = c + ((h << 5) - h)`` where the shift operates on the 32-bit
    signed value of ``h`` and the subtraction on the full value.
    """
    encoded = identifier.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = code_unit + (_to_int32(_to_int32(h) << 5) - h)
    return abs(h)


def _parse_hex(hex_color: str) -> tuple[int, int, int]:
    digits = hex_color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def _yiq(r: int, g: int, b: int) -> float:
    return (r * 299 + g * 587 + b * 114) / 1000


def ensure_dark_enough(hex_color: str | None, threshold: int = DARKNESS_THRESHOLD) -> str:
    """Darken a color until white text on it stays legible.

    Channels are scaled by ``threshold / yiq`` when the YIQ brightness
    exceeds the threshold. Short ``#rgb`` colors are expanded.
    """
    if not hex_color:
        return DEFAULT_COLOR
    try:
        r, g, b = _parse_hex(hex_color)
    except ValueError:
        return DEFAULT_COLOR

    yiq = _yiq(r, g, b)
    if yiq > threshold:
        factor = threshold / yiq
        r, g, b = (math.floor(c * factor) for c in (r, g, b))
    return f"#{r:02x}{g:02x}{b:02x}"


def contrast_color(hex_color: str | None) -> str:
    """Black or white text color for a background."""
    if not hex_color:
        return "#ffffff"
    try:
        r, g, b = _parse_hex(hex_color)
    except ValueError:
        return "#ffffff"
    return "#000000" if _yiq(r, g, b) >= 128 else "#ffffff"


def color_for(identifier: str | int | None) -> str:
    """Map an identifier to a palette color.

    About 80% of hashes pick from the vibrant part of the palette. The
    index within the pool uses the golden-ratio fraction of the hash,
    which spreads neighbouring hashes better than ``hash % n``.
    """
    if identifier is None or identifier == "":
        return DEFAULT_COLOR

    h = hash_identifier(str(identifier))
    use_vibrant = h % 100 < VIBRANT_SHARE_PERCENT
    pool = VIBRANT_COUNT if use_vibrant else len(PALETTE)
    index = math.floor(((h * GOLDEN_RATIO) % 1) * pool)
    return ensure_dark_enough(PALETTE[index])


def holiday_color(holiday_type: HolidayType | str | None) -> str:
    try:
        return HOLIDAY_COLORS[HolidayType(holiday_type)]
    except ValueError:
        return HOLIDAY_COLORS[HolidayType.MINOR]


def event_color(
    event_type_label: str | None = None,
    project_id: str | None = None,
    label_color: str | None = None,
) -> str:
    """Color for a store-backed event.

    Priority: the store's label color, then the fixed all-day type
    colors, then the project hash, then the default.
    """
    if label_color:
        return ensure_dark_enough(label_color)
    if event_type_label and event_type_label in EVENT_TYPE_COLORS:
        return ensure_dark_enough(EVENT_TYPE_COLORS[event_type_label])
    if project_id:
        return color_for(str(project_id))
    return ensure_dark_enough(FALLBACK_EVENT_COLOR)
