"""Classification predicates used by the scanners.

Pure functions over plain values and DOM snapshots (dicts produced by
``page.evaluate``), so they can be exercised without a browser. They are
best-effort heuristics: the contrast check is not a WCAG contrast ratio and
the reflection check only looks for payload markup in the serialized source.
"""

import re
from typing import Iterable, Mapping, Optional, Tuple

CSRF_TOKEN_MARKERS = ("token", "csrf", "nonce")
MARKUP_CHARS = ("<", ">", '"')
SCRIPT_URI_SCHEME = "javascript:"
INTERACTIVE_TAGS = frozenset({"A", "BUTTON", "INPUT", "SELECT", "TEXTAREA"})

LIGHT_CHANNEL_MIN = 240
DARK_CHANNEL_MAX = 20

RGBA = Tuple[int, int, int, float]

_RGB_PATTERN = re.compile(
    r"rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([\d.]+)\s*)?\)",
    re.IGNORECASE,
)
_HEX_PATTERN = re.compile(r"#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def is_payload_reflected(payload: str, page_source: Optional[str]) -> bool:
    """Whether the payload's markup survives in the serialized page source.

    A serialized page escapes only ``&``, ``<`` and ``>`` in text, so a
    markup payload counts only when it appears verbatim. A ``javascript:``
    URI carries no markup and counts only as an ``href`` or ``src`` value.
    """
    if not payload or not page_source:
        return False
    if any(char in payload for char in MARKUP_CHARS):
        return payload in page_source
    if payload.lower().startswith(SCRIPT_URI_SCHEME):
        pattern = r"""\b(?:href|src)\s*=\s*["']?\s*""" + re.escape(payload)
        return re.search(pattern, page_source, re.IGNORECASE) is not None
    return payload in page_source


def suggests_auth_bypass(original_url: str, current_url: str, error_shown: bool) -> bool:
    """Whether a login attempt with an injection payload looks accepted.

    Leaving the login URL, or staying on it without an error message, are
    both treated as a possible bypass.
    """
    return current_url != original_url or not error_shown


def has_csrf_token(hidden_input_names: Iterable[Optional[str]]) -> bool:
    """Whether any hidden input name looks like an anti-CSRF token."""
    for name in hidden_input_names:
        if not name:
            continue
        lowered = name.lower()
        if any(marker in lowered for marker in CSRF_TOKEN_MARKERS):
            return True
    return False


def parse_css_color(value: Optional[str]) -> Optional[RGBA]:
    """Parse ``rgb()``, ``rgba()``, hex or ``transparent`` into (r, g, b, alpha)."""
    if not value:
        return None
    value = value.strip()
    if value.lower() == "transparent":
        return (0, 0, 0, 0.0)

    match = _RGB_PATTERN.search(value)
    if match:
        red, green, blue = (min(int(match.group(i)), 255) for i in (1, 2, 3))
        alpha = float(match.group(4)) if match.group(4) is not None else 1.0
        return (red, green, blue, alpha)

    match = _HEX_PATTERN.match(value)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16), 1.0)

    return None


def is_light(color: RGBA) -> bool:
    return all(channel >= LIGHT_CHANNEL_MIN for channel in color[:3])


def is_dark(color: RGBA) -> bool:
    return all(channel <= DARK_CHANNEL_MAX for channel in color[:3])


def is_low_contrast(foreground: Optional[str], background: Optional[str]) -> bool:
    """
    Whether text and background colors sit in the same light or dark extreme.

    A fully transparent background is treated as the default white canvas.
    Unparsable colors are never flagged.
    """
    fg = parse_css_color(foreground)
    bg = parse_css_color(background)
    if fg is None or bg is None:
        return False
    if bg[3] == 0:
        bg = (255, 255, 255, 1.0)
    return (is_light(fg) and is_light(bg)) or (is_dark(fg) and is_dark(bg))


def field_has_label(field: Mapping[str, object]) -> bool:
    """Whether a form field snapshot has a ``label[for]`` match or a wrapping label."""
    return bool(field.get("hasLabelFor")) or bool(field.get("wrappedInLabel"))


def is_keyboard_trap(tag: str, has_click_handler: bool, has_key_handler: bool) -> bool:
    """Click-only handler on an element that is not natively keyboard operable."""
    return (
        has_click_handler
        and not has_key_handler
        and (tag or "").upper() not in INTERACTIVE_TAGS
    )


def has_positive_tabindex(value: Optional[str]) -> bool:
    """Whether a tabindex value is an integer greater than zero."""
    if value is None:
        return False
    try:
        return int(str(value).strip()) > 0
    except ValueError:
        return False


def describe_element(tag: Optional[str], class_name: Optional[str] = None) -> str:
    """Render ``TAG.class1.class2`` for finding descriptions."""
    label = (tag or "unknown").upper()
    if class_name and str(class_name).strip():
        label += "." + ".".join(str(class_name).split())
    return label
