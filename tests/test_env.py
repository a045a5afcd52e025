"""
Tests for .env loading.
"""

import os

from artselect.env import load_env


def test_loads_env_file(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("ARTSELECT_TEST_VALUE=from-file\n")
    monkeypatch.chdir(tmp_path)
    # setenv first so teardown removes the value dotenv writes
    monkeypatch.setenv("ARTSELECT_TEST_VALUE", "")
    monkeypatch.delenv("ARTSELECT_TEST_VALUE")

    load_env()

    assert os.environ["ARTSELECT_TEST_VALUE"] == "from-file"


def test_existing_environment_wins(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("ARTSELECT_TEST_VALUE=from-file\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ARTSELECT_TEST_VALUE", "from-shell")

    load_env()

    assert os.environ["ARTSELECT_TEST_VALUE"] == "from-shell"


def test_missing_file_is_fine(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    load_env()
