"""Shared fixtures for Playwright UI tests.

Starts the Ramblog memo notebook as a subprocess against a seeded temporary
data directory and provides a ``live_url`` fixture with the base URL. The
server is started once per session to keep test runs fast.
"""

from __future__ import annotations

import os
import subprocess
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest
import requests

from memos.memo import MemoDraft
from memos.store import MemoStore

_ROOT = Path(__file__).parent.parent.parent
_APP = _ROOT / "notebooks" / "memo_app.py"
_PORT = 2719


@pytest.fixture(scope="session")
def seeded_data_dir(tmp_path_factory) -> Path:
    """A data directory holding two memos for the app to display."""
    data_dir = tmp_path_factory.mktemp("ramblog-data")
    store = MemoStore.from_data_dir(
        data_dir, clock=lambda: datetime(2024, 1, 1, 9, tzinfo=timezone.utc)
    )
    store.create(MemoDraft(title="Getting Started", tags=["meta"], content="Welcome to **Ramblog**."))
    store.create(MemoDraft(title="Groceries", tags=["home"], content="Milk, eggs."))
    return data_dir


@pytest.fixture(scope="session")
def marimo_server(seeded_data_dir: Path):
    """Start the marimo app server; yield the process; terminate on teardown."""
    env = {**os.environ, "MEMOS_DATA_DIR": str(seeded_data_dir)}
    proc = subprocess.Popen(
        [
            sys.executable,
            "-m",
            "marimo",
            "run",
            str(_APP),
            "--port",
            str(_PORT),
            "--headless",
        ],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=str(_ROOT),
        env=env,
    )

    # Wait up to 20 s for the server to be ready
    deadline = time.time() + 20
    while time.time() < deadline:
        try:
            r = requests.get(f"http://localhost:{_PORT}/", timeout=1)
            if r.status_code < 500:
                break
        except requests.RequestException:
            time.sleep(0.5)
    else:
        proc.terminate()
        stdout, stderr = proc.communicate(timeout=5)
        pytest.fail(
            f"Marimo server did not start within 20 s.\n"
            f"stdout: {stdout.decode()}\nstderr: {stderr.decode()}"
        )

    yield proc

    proc.terminate()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        proc.kill()


@pytest.fixture(scope="session")
def live_url(marimo_server) -> str:  # noqa: ARG001
    return f"http://localhost:{_PORT}"
