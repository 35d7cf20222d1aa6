"""Playwright end-to-end tests for the Ramblog memo notebook.

These tests require:
  - ``playwright`` and ``pytest-playwright`` installed
  - Playwright browsers installed (``playwright install chromium``)
  - The marimo server started via the ``live_url`` session fixture in conftest.py

Run with::

    pytest -m e2e tests/test_ui --browser chromium

Tests are marked ``@pytest.mark.e2e`` and deselected by the default
``addopts`` so fast runs skip them.
"""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.e2e


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _wait_for_marimo(page, timeout: int = 15_000) -> None:
    """Wait until the Marimo app shell is interactive."""
    page.wait_for_selector("#root", timeout=timeout)
    # Give reactive cells time to settle
    page.wait_for_timeout(2_000)


# ---------------------------------------------------------------------------
# App shell
# ---------------------------------------------------------------------------


class TestAppShell:
    def test_page_loads(self, page, live_url):
        page.goto(live_url)
        _wait_for_marimo(page)
        assert "Ramblog" in page.title() or page.locator("body").is_visible()

    def test_sidebar_lists_seeded_memos(self, page, live_url):
        page.goto(live_url)
        _wait_for_marimo(page)
        assert page.locator("text=Memos (2)").first.is_visible()
        assert page.locator("text=Getting Started").first.is_visible()

    def test_tabs_present(self, page, live_url):
        page.goto(live_url)
        _wait_for_marimo(page)
        for tab_label in ("Memo", "Edit", "Capture", "Activity"):
            assert page.locator(f"text={tab_label}").first.is_visible()


# ---------------------------------------------------------------------------
# Sidebar & memo view
# ---------------------------------------------------------------------------


class TestSidebarNavigation:
    def test_search_filters_memos(self, page, live_url):
        page.goto(live_url)
        _wait_for_marimo(page)
        search = page.locator("input[placeholder*='Search']").first
        search.fill("milk")
        page.wait_for_timeout(1_000)
        assert page.locator("text=Memos (1)").first.is_visible()

    def test_clicking_memo_shows_body(self, page, live_url):
        page.goto(live_url)
        _wait_for_marimo(page)
        page.locator("text=Getting Started").first.click()
        page.wait_for_timeout(1_500)
        assert page.locator("text=Welcome to").first.is_visible()

    def test_edit_tab_prefills_selected_memo(self, page, live_url):
        page.goto(live_url)
        _wait_for_marimo(page)
        page.locator("text=Getting Started").first.click()
        page.wait_for_timeout(1_500)
        page.locator("text=Edit").first.click()
        page.wait_for_timeout(1_000)
        assert page.locator("text=Editing").first.is_visible()


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


class TestActivity:
    def test_month_calendar_rendered(self, page, live_url):
        page.goto(live_url)
        _wait_for_marimo(page)
        page.locator("text=Activity").first.click()
        page.wait_for_timeout(1_000)
        assert page.locator("text=memos in total").first.is_visible()
        assert page.locator("text=Mon").first.is_visible()
