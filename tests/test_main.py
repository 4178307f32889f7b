import logging

import pytest
import soundfile as sf

import main


def test_extended_mode_requires_target(fs):
    with pytest.raises(SystemExit):
        main.parse_arguments(fs, ["--audio", "rain.wav", "--mode", "extended"])


def test_run_single_export(fs, ambience_file):
    args = main.parse_arguments(fs, ["--audio", ambience_file.name, "--start", "0.5", "--end", "2.5"])
    result = main.run(args, fs)
    assert sf.info(result.audio_path).frames == result.loop_points.loop_samples


def test_run_extended_export(fs, ambience_file):
    args = main.parse_arguments(
        fs,
        ["--audio", ambience_file.name, "--mode", "extended", "--target", "4", "--output", "long.wav"],
    )
    result = main.run(args, fs)
    assert result.audio_path == str(fs.sound_output_folder / "long.wav")
    assert sf.info(result.audio_path).frames == 4 * 22050


def test_main_reports_failure(fs, monkeypatch):
    monkeypatch.setattr(main, "FS", lambda: fs)
    assert main.main(["--audio", "missing.wav"]) == 1
    assert "Could not load audio" in (fs.logs_folder / "app.log").read_text(encoding="utf-8")
    logging.getLogger().setLevel(logging.WARNING)


def test_main_success(fs, ambience_file, monkeypatch):
    monkeypatch.setattr(main, "FS", lambda: fs)
    assert main.main(["--audio", ambience_file.name, "--crossfade", "0.08"]) == 0
    assert (fs.sound_output_folder / "ambience_loop.wav").exists()
