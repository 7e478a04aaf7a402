import io
import subprocess
import sys
from datetime import date

import pytest

from remind_forecast.errors import ConfigError, ForecastError, SourceError
from remind_forecast.main import main, run_once

REMIND_OUTPUT = (
    "# fileinfo 3 /home/me/.reminders\n"
    "2024/01/05 * * * * old news\n"
    "# fileinfo 4 /home/me/.reminders\n"
    "2024/01/10 * * * 450 7:30am dentist\n"
    "# fileinfo 5 /home/me/.reminders\n"
    "2024/01/12 * * * * conference\n"
    "# fileinfo 5 /home/me/.reminders\n"
    "2024/01/13 * * * * conference\n"
)


def _runner(stdout):
    def run(cmd):
        return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr="")
    return run


def test_run_once_prints_forecast_newest_first(tmp_path):
    out = io.StringIO()

    lines = run_once(
        config_path=str(tmp_path / "config.yaml"),
        backend="remind",
        today=date(2024, 1, 10),
        runner=_runner(REMIND_OUTPUT),
        out=out,
    )

    assert lines == [
        "conference in 2 days (fri 12 jan to sat 13 jan)",
        "dentist today at 7:30am (wed 10 jan)",
    ]
    assert out.getvalue() == "\n".join(lines) + "\n"


def test_run_once_honours_config_order_and_color(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("backend: remind\norder: forward\ncolor: always\n", encoding="utf-8")

    lines = run_once(
        config_path=str(cfg_path),
        today=date(2024, 1, 10),
        runner=_runner(REMIND_OUTPUT),
        out=io.StringIO(),
    )

    assert lines[0] == "\033[1mdentist today at 7:30am\033[0m (wed 10 jan)"
    assert lines[1].startswith("conference")


def test_run_once_reads_saved_output(tmp_path):
    saved = tmp_path / "icalbuddy.txt"
    saved.write_text("Standup\n    Jan 11, 2024 at 9:00\n", encoding="utf-8")

    lines = run_once(
        config_path=str(tmp_path / "config.yaml"),
        backend="icalbuddy",
        today=date(2024, 1, 10),
        input_path=str(saved),
        out=io.StringIO(),
    )

    assert lines == ["Standup tomorrow at 9:00 (thu 11 jan)"]


def test_run_once_rejects_unknown_order(tmp_path):
    with pytest.raises(ForecastError):
        run_once(
            config_path=str(tmp_path / "config.yaml"),
            backend="remind",
            order="sideways",
            today=date(2024, 1, 10),
            runner=_runner(REMIND_OUTPUT),
            out=io.StringIO(),
        )


def test_main_reports_errors_and_exits_nonzero(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REMIND_FORECAST_CONFIG", str(tmp_path / "config.yaml"))
    monkeypatch.setattr(sys, "argv", ["remind-forecast", "--backend", "remind"])

    def failing(*_args, **_kwargs):
        raise SourceError("remind exited with status 1", ["remind"], "no such file")

    monkeypatch.setattr("remind_forecast.main.read_lines", failing)

    with pytest.raises(SystemExit) as exc:
        main()

    assert exc.value.code == 1
    assert "remind exited with status 1: no such file" in capsys.readouterr().err


def test_unknown_log_level_raises_config_error(tmp_path, monkeypatch):
    monkeypatch.setenv("REMIND_FORECAST_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigError, match="log level"):
        run_once(
            config_path=str(tmp_path / "config.yaml"),
            backend="remind",
            today=date(2024, 1, 10),
            runner=_runner(REMIND_OUTPUT),
            out=io.StringIO(),
        )


def test_main_reports_bad_config_and_exits_nonzero(tmp_path, monkeypatch, capsys):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("weeks_out: lots\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "argv", ["remind-forecast", "--config", str(cfg_path)])

    with pytest.raises(SystemExit) as exc:
        main()

    assert exc.value.code == 1
    assert capsys.readouterr().err.startswith("remind-forecast: weeks_out must be an integer")
