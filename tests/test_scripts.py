"""End-to-end tests for the command-line scripts."""

import importlib.util
import json
from pathlib import Path
import sys

import pytest


SCRIPTS_DIR = Path(__file__).resolve().parents[1] / "scripts"


def load_script(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def run_simulation():
    return load_script("run_simulation")


@pytest.fixture
def manage_history():
    return load_script("manage_history")


def run_args(tmp_path, *extra):
    return [
        "run_simulation.py",
        "--population", "1000",
        "--initial-infected", "10",
        "--days", "50",
        "--owner", "ana",
        "--history", str(tmp_path / "simulacoes.json"),
        "--out-dir", str(tmp_path / "run"),
        "--no-console-log",
        *extra,
    ]


def test_run_writes_history_and_artifacts(run_simulation, tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", run_args(tmp_path))
    assert run_simulation.main() == 0

    records = json.loads((tmp_path / "simulacoes.json").read_text(encoding="utf-8"))
    assert len(records) == 1
    assert records[0]["utilizador"] == "ana"

    run_dir = tmp_path / "run"
    config = json.loads((run_dir / "config.json").read_text(encoding="utf-8"))
    assert config["durationDays"] == 50
    lines = (run_dir / "series.csv").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "dia,Suscetíveis,Infetados,Recuperados,Óbitos"
    assert lines[1] == "0,990,10,0,0"
    assert len(lines) == 52


def test_run_rejects_invalid_parameters(run_simulation, tmp_path, monkeypatch):
    argv = run_args(tmp_path)
    argv[argv.index("--population") + 1] = "100"
    argv[argv.index("--initial-infected") + 1] = "150"
    monkeypatch.setattr(sys, "argv", argv)

    assert run_simulation.main() == 2
    assert not (tmp_path / "simulacoes.json").exists()
    assert not (tmp_path / "run").exists()


def test_run_with_plot_and_reference_check(run_simulation, tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", run_args(tmp_path, "--save-plot", "--check-reference"))
    assert run_simulation.main() == 0
    assert (tmp_path / "run" / "curves.png").exists()


def test_reference_check_integrates_once(run_simulation, tmp_path, monkeypatch):
    import src.sird.service as service_module

    calls = []
    original = service_module.simulate_sird

    def counting(*args, **kwargs):
        calls.append(args)
        return original(*args, **kwargs)

    monkeypatch.setattr(service_module, "simulate_sird", counting)
    monkeypatch.setattr(sys, "argv", run_args(tmp_path, "--no-artifacts", "--check-reference"))
    assert run_simulation.main() == 0
    assert len(calls) == 1


def test_manage_history_list_show_delete(run_simulation, manage_history, tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", run_args(tmp_path, "--no-artifacts"))
    assert run_simulation.main() == 0
    history = str(tmp_path / "simulacoes.json")
    record_id = json.loads(Path(history).read_text(encoding="utf-8"))[0]["id"]

    monkeypatch.setattr(sys, "argv", ["manage_history.py", "--history", history, "list", "--owner", "ana"])
    assert manage_history.main() == 0
    out = capsys.readouterr().out
    assert str(record_id) in out
    assert "total=1" in out

    out_dir = tmp_path / "export"
    monkeypatch.setattr(sys, "argv", [
        "manage_history.py", "--history", history, "show", "--id", str(record_id), "--out-dir", str(out_dir),
    ])
    assert manage_history.main() == 0
    assert (out_dir / f"series_{record_id}.csv").exists()

    monkeypatch.setattr(sys, "argv", ["manage_history.py", "--history", history, "delete", "--id", str(record_id)])
    assert manage_history.main() == 0
    assert json.loads(Path(history).read_text(encoding="utf-8")) == []


def test_manage_history_show_unknown_id(manage_history, tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", [
        "manage_history.py", "--history", str(tmp_path / "none.json"), "show", "--id", "42",
    ])
    assert manage_history.main() == 1
