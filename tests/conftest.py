import os
import sys

import pytest

# Ensure the project root is on sys.path so the package is importable without an install.
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from vbatch.config import Settings


class RecordingDisplay:
    """Stand-in for EncodeProgress that records what it is given."""
    def __init__(self, job=None):
        self.job = job
        self.updates = []
        self.lines = []
        self.entered = False
        self.exited = False

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited = True

    def update(self, percent):
        self.updates.append(percent)

    def print_line(self, line):
        self.lines.append(line)


@pytest.fixture
def settings(tmp_path):
    """Settings with encoder output echo disabled and logs under tmp_path."""
    settings = Settings.from_environment(log_dir=tmp_path / "logs")
    settings.batch.echo_encoder_output = False
    return settings


@pytest.fixture
def displays():
    return []


@pytest.fixture
def display_factory(displays):
    def factory(job):
        display = RecordingDisplay(job)
        displays.append(display)
        return display
    return factory
