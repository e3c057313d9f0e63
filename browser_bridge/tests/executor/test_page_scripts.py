"""Runs the click and type scripts inside headless Chromium."""

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from browser_bridge.executor import scripts

RECORDER = """
<script>
window.events = [];
function record(el) {
    for (const name of ['pointerdown', 'mousedown', 'mouseup', 'click', 'input', 'change']) {
        el.addEventListener(name, () => window.events.push(el.id + ':' + name));
    }
}
</script>
"""

FULL_SCREEN = "position:fixed;left:0;top:0;width:100vw;height:100vh;margin:0;"


@pytest.fixture(scope="module")
def page():
    with sync_playwright() as pw:
        try:
            browser = pw.chromium.launch(headless=True)
        except PlaywrightError as exc:
            pytest.skip(f"chromium is not installed: {exc}")
        try:
            yield browser.new_page(viewport={"width": 800, "height": 600})
        finally:
            browser.close()


def _load(page, body):
    page.set_content(f"<html><body style='margin:0'>{RECORDER}{body}</body></html>")
    page.evaluate("document.querySelectorAll('[id]').forEach(record)")


def _events(page):
    return page.evaluate("window.events")


def test_click_fires_native_click_then_synthetic_sequence(page):
    _load(page, f"<button id='b' style='{FULL_SCREEN}'>go</button>")

    assert page.evaluate(scripts.click_script(400.0, 300.0)) is True
    assert _events(page) == ["b:click", "b:pointerdown", "b:mousedown", "b:mouseup", "b:click"]


def test_click_outside_viewport_finds_nothing(page):
    _load(page, "<div id='d'>x</div>")

    assert page.evaluate(scripts.click_script(5000.0, 5000.0)) is False
    assert _events(page) == []


def test_type_appends_to_focused_field(page):
    _load(page, "<input id='q' value='ab'><input id='other' style='" + FULL_SCREEN + "'>")
    page.focus("#q")

    assert page.evaluate(scripts.type_script('c"d')) is True
    assert page.input_value("#q") == 'abc"d'
    assert page.input_value("#other") == ""
    assert _events(page) == ["q:input", "q:change"]


def test_type_without_focus_uses_and_focuses_centre_element(page):
    _load(page, f"<textarea id='t' style='{FULL_SCREEN}'>hi</textarea>")
    page.evaluate("document.activeElement && document.activeElement.blur()")

    assert page.evaluate(scripts.type_script(" there")) is True
    assert page.input_value("#t") == "hi there"
    assert page.evaluate("document.activeElement.id") == "t"


def test_type_prefers_centre_over_top_candidate(page):
    # The field sits at the 20px fallback point, but the centre element wins and has no value.
    _load(
        page,
        "<input id='top' style='position:fixed;left:0;top:0;width:100vw;height:40px;'>"
        "<div id='middle' style='position:fixed;left:0;top:200px;width:100vw;height:200px;'>x</div>",
    )
    page.evaluate("document.activeElement && document.activeElement.blur()")

    assert page.evaluate(scripts.type_script("abc")) is False
    assert page.input_value("#top") == ""
    assert _events(page) == []


def test_type_rejects_focused_element_without_value(page):
    _load(page, "<div id='ed' tabindex='0'>text</div>")
    page.focus("#ed")

    assert page.evaluate(scripts.type_script("abc")) is False
    assert page.inner_text("#ed") == "text"
