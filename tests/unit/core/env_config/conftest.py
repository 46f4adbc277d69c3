"""Fixtures for environment configuration tests."""

import os

import pytest

_MARKERS = ("CI", "KUBERNETES_SERVICE_HOST", "DOCKER_CONTAINER")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from HTTP_PIPELINE_* variables, CI markers and local .env files."""
    for key in list(os.environ):
        if key.upper().startswith("HTTP_PIPELINE_") or key in _MARKERS:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
