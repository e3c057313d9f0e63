"""JavaScript snippets evaluated against the surface by the action handlers."""

from __future__ import annotations

import json
import math

READY_STATE_SCRIPT = "document.readyState"

_CLICK_TEMPLATE = """
(() => {
    const element = document.elementFromPoint(%(px)s, %(py)s);
    if (!element) { return false; }
    try { element.click(); } catch (e) {}
    for (const name of ['pointerdown', 'mousedown', 'mouseup', 'click']) {
        element.dispatchEvent(new Event(name, { bubbles: true, cancelable: true }));
    }
    return true;
})()
"""

_SCROLL_TEMPLATE = "(() => { window.scrollBy(0, %(dy)s); return true; })()"

_TYPE_TEMPLATE = """
(() => {
    const candidates = [];
    const center = document.elementFromPoint(window.innerWidth / 2, window.innerHeight / 2);
    if (center) candidates.push(center);
    const top = document.elementFromPoint(window.innerWidth / 2, 20);
    if (top) candidates.push(top);
    let target = document.activeElement && document.activeElement !== document.body ? document.activeElement : null;
    if (!target) {
        target = candidates.find(el => typeof el.focus === 'function') || null;
        if (target) { target.focus(); }
    }
    if (!target || typeof target.value === 'undefined') { return false; }
    const currentValue = target.value ?? '';
    target.value = currentValue + %(literal)s;
    target.dispatchEvent(new Event('input', { bubbles: true }));
    target.dispatchEvent(new Event('change', { bubbles: true }));
    return true;
})()
"""


def js_literal(text: str) -> str:
    """Encode `text` as a JavaScript string literal that is safe to splice into a script."""
    literal = json.dumps(text, ensure_ascii=False)
    # JSON allows U+2028/U+2029 raw; older JS engines treat them as line breaks.
    return literal.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


def js_number(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"cannot embed non-finite number {value!r}")
    return repr(float(value))


def click_script(px: float, py: float) -> str:
    return _CLICK_TEMPLATE % {"px": js_number(px), "py": js_number(py)}


def scroll_script(delta_y: float) -> str:
    return _SCROLL_TEMPLATE % {"dy": js_number(delta_y)}


def type_script(text: str) -> str:
    return _TYPE_TEMPLATE % {"literal": js_literal(text)}


__all__ = ["READY_STATE_SCRIPT", "js_literal", "js_number", "click_script", "scroll_script", "type_script"]
