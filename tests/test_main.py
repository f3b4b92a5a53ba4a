"""Tests for application bootstrap and command-line options."""

from unittest.mock import patch

import typer
from typer.testing import CliRunner

import main
from holiday_planner.models import Holiday

runner = CliRunner()


def make_app():
    app = typer.Typer()
    app.command()(main.main)
    return app


def test_build_app_memory_mode_wires_view_model():
    store, vm = main.build_app(None, memory=True)
    try:
        vm.add_holiday(Holiday(title="Rome"))
        store.flush(timeout=2)
        assert [h.title for h in vm.holidays.value] == ["Rome"]
    finally:
        vm.close()
        store.close()


def test_build_app_uses_data_file(tmp_path):
    path = tmp_path / "trips.json"
    store, vm = main.build_app(path, memory=False)
    try:
        vm.add_holiday(Holiday(title="Rome"))
        assert path.exists()
    finally:
        vm.close()
        store.close()


@patch("main.run_gui")
def test_cli_starts_gui_in_memory(mock_run_gui):
    result = runner.invoke(make_app(), ["--memory"])
    assert result.exit_code == 0
    mock_run_gui.assert_called_once()
    store, vm = mock_run_gui.call_args[0]
    vm.close()
    store.close()


@patch("main.run_gui")
def test_cli_rejects_unknown_log_level(mock_run_gui):
    result = runner.invoke(make_app(), ["--memory", "--log-level", "LOUD"])
    assert result.exit_code == 1
    mock_run_gui.assert_not_called()
