import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from modeldex.utils import flow_log  # noqa: E402

_real_trace_enabled = flow_log._trace_enabled


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Signals and widgets need an application object; tests pump events by hand."""
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def quiet_trace_logs(monkeypatch):
    """Keep DEBUG trace lines off regardless of the user's saved settings."""
    monkeypatch.setattr(flow_log, "_trace_enabled", lambda: False)


@pytest.fixture
def real_trace_enabled():
    return _real_trace_enabled
