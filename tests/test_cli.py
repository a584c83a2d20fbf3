from grav.cli import main
from grav.io import read_snapshots


def test_run_writes_snapshots_and_log(tmp_path):
    out = tmp_path / "out.yaml"
    log = tmp_path / "grav.log"
    code = main([
        "-f", str(log), "-l", "debug", "-M", "overwrite",
        "run", "--entities", "6", "--steps", "3", "--seed", "4",
        "--output", str(out), "--output-mode", "overwrite",
        "--workers", "1", "--no-progress",
    ])
    assert code == 0
    docs = read_snapshots(out)
    assert [d["step"] for d in docs] == [1, 2, 3]
    assert len(docs[0]["entities"]) == 6

    text = log.read_text()
    print(text[:500])
    assert "[INFO]" in text
    assert "[DEBUG]" in text
    assert "Simulation finished after 3 steps." in text


def test_log_settings_from_environment(tmp_path, monkeypatch):
    log = tmp_path / "env.log"
    monkeypatch.setenv("GRAV_LOG_FILE", str(log))
    monkeypatch.setenv("GRAV_LOG_LEVEL", "warning")
    monkeypatch.chdir(tmp_path)
    code = main(["run", "--entities", "2", "--steps", "1", "--no-output", "--no-progress"])
    assert code == 0
    assert log.exists()
    assert "[INFO]" not in log.read_text()
    assert not (tmp_path / "output.yaml").exists()


def test_config_file_and_overrides(tmp_path):
    cfg = tmp_path / "run.yaml"
    out = tmp_path / "snaps.yaml"
    log = tmp_path / "grav.log"
    assert main(["-f", str(log), "write-config", str(cfg)]) == 0
    assert cfg.exists()

    code = main([
        "-f", str(log), "run", "--config", str(cfg),
        "--entities", "4", "--steps", "2", "--output", str(out), "--no-progress", "--profile",
    ])
    assert code == 0
    assert len(read_snapshots(out)) == 2
    assert "Stage timings" in log.read_text()


def test_errors_exit_with_status_one(tmp_path, capsys):
    log = tmp_path / "grav.log"
    bad = tmp_path / "bad.json"
    bad.write_text('{"context": {"dt": -1}}')

    assert main(["-f", str(log), "run", "--config", str(bad), "--no-progress"]) == 1
    assert "grav: error" in capsys.readouterr().err

    assert main(["-f", str(log), "run", "--steps", "-2", "--no-progress"]) == 1

    code = main(["-f", str(log), "run", "--entities", "1", "--steps", "1",
                 "--output", str(tmp_path), "--no-progress"])
    assert code == 1
    assert "grav: error" in capsys.readouterr().err
