"""
Command line tests.

Runs main() in-process on a synthetic WAV file (4 s silence + 6 s tone).
"""

import json
import logging

import pytest
import soundfile as sf

from rehearsal_link.cli import EXIT_FAILED, EXIT_OK, build_parser, main
from rehearsal_link.core.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_logging(monkeypatch):
    """main() reconfigures the root logger; put it back afterwards."""
    for name in ("REHEARSAL_LINK_CONFIG", "LOG_LEVEL", "LOG_JSON", "LOG_FILE", "ANALYSIS_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    reset_settings()


# =============================================================================
# Parser
# =============================================================================

@pytest.mark.unit
class TestParser:
    """Tests for argument parsing."""

    def test_analyze_arguments(self):
        args = build_parser().parse_args(["analyze", "take.wav", "--json", "--normalize", "rms"])
        assert args.command == "analyze"
        assert args.json is True
        assert args.normalize == "rms"

    def test_export_repeatable_type(self):
        args = build_parser().parse_args([
            "export", "take.wav", "out.wav", "--type", "conversation", "--type", "silence",
        ])
        assert args.types == ["conversation", "silence"]

    def test_rejects_unknown_type(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["export", "take.wav", "out.wav", "--type", "music"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


# =============================================================================
# Commands
# =============================================================================

@pytest.mark.integration
class TestCommands:
    """End-to-end runs of main()."""

    def test_analyze_json(self, wav_file, capsys):
        code = main(["analyze", str(wav_file), "--json", "--no-progress"])
        assert code == EXIT_OK

        result = json.loads(capsys.readouterr().out)
        assert [s["type"] for s in result["segments"]] == ["silence", "performance"]
        assert result["segments"][-1]["endTime"] == pytest.approx(10.0)
        assert len(result["waveform"]) == 1000
        assert result["source_name"] == "take.wav"

    def test_analyze_timeline(self, wav_file, capsys):
        code = main(["--log-level", "ERROR", "analyze", str(wav_file), "--no-progress"])
        assert code == EXIT_OK

        out = capsys.readouterr().out
        assert "take.wav" in out
        assert "Silence" in out
        assert "Performance" in out

    def test_overrides(self, wav_file, capsys):
        code = main([
            "analyze", str(wav_file), "--json", "--no-progress",
            "--waveform-samples", "100", "--normalize", "peak",
        ])
        assert code == EXIT_OK
        assert len(json.loads(capsys.readouterr().out)["waveform"]) == 100

    def test_export_performance(self, wav_file, tmp_path, capsys):
        output = tmp_path / "performance.wav"
        code = main([
            "--log-level", "ERROR",
            "export", str(wav_file), str(output), "--type", "performance", "--no-progress",
        ])
        assert code == EXIT_OK
        assert "Exported 1 segments" in capsys.readouterr().out
        assert sf.info(str(output)).duration == pytest.approx(6.0, abs=0.5)

    def test_missing_audio(self, tmp_path, capsys):
        code = main(["--log-level", "ERROR", "analyze", str(tmp_path / "missing.wav"), "--no-progress"])
        assert code == EXIT_FAILED
        assert "not found" in capsys.readouterr().err

    def test_missing_config(self, wav_file, tmp_path, capsys):
        code = main(["--config", str(tmp_path / "none.yaml"), "analyze", str(wav_file)])
        assert code == EXIT_FAILED
        assert "Configuration file not found" in capsys.readouterr().err

    def test_analysis_failure(self, wav_file, tmp_path, capsys):
        """An invalid FFT window fails the run with exit code 1."""
        config = tmp_path / "config.yaml"
        config.write_text("features:\n  window_size: 1000\n")

        code = main([
            "--log-level", "ERROR", "--config", str(config),
            "analyze", str(wav_file), "--no-progress",
        ])
        assert code == EXIT_FAILED
        assert "power of two" in capsys.readouterr().err
