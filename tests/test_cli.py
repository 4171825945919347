"""Tests for the command-line interface.

WHY: The CLI is the batch entry point. It must write the right files, keep
stdout clean for piping, chain --mode steps, and exit with status 1 on
every user error instead of a traceback.

HOW: main(argv) with explicit argument lists, files under tmp_path, and
capsys to separate stdout (SRT) from stderr (status).
"""

import pytest

from srt_merger.cli import build_parser, main
from srt_merger.core.parser import parse_srt
from srt_merger.core.serializer import ANNOTATED_HEADER


@pytest.fixture
def srt_file(tmp_path, sample_text):
    path = tmp_path / "track.srt"
    path.write_text(sample_text, encoding="utf-8")
    return path


class TestBuildParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["in.srt"])
        assert args.input_file == "in.srt"
        assert args.mode is None
        assert args.output is None
        assert not args.stats

    def test_mode_is_repeatable(self):
        args = build_parser().parse_args(["in.srt", "--mode", "merge", "--mode", "split"])
        assert args.mode == ["merge", "split"]

    def test_unknown_method_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["in.srt", "--split-method", "bogus"])


class TestMain:
    """Tests for main() end to end."""

    def test_merge_to_stdout(self, srt_file, capsys):
        main([str(srt_file), "--max-gap", "0.2"])
        captured = capsys.readouterr()
        assert len(parse_srt(captured.out)) == 8
        assert "Loaded 15 entries" in captured.err

    def test_output_and_annotated_files(self, srt_file, tmp_path, capsys):
        out = tmp_path / "out.srt"
        annotated = tmp_path / "out.txt"
        main([
            str(srt_file), "--mode", "split", "--max-duration", "4",
            "-o", str(out), "--annotated", str(annotated),
        ])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert len(parse_srt(out.read_text(encoding="utf-8"))) > 15
        assert annotated.read_text(encoding="utf-8").startswith(ANNOTATED_HEADER + "#1#")

    def test_chained_modes(self, srt_file, capsys):
        main([str(srt_file), "--mode", "merge", "--mode", "split",
              "--max-gap", "0.2", "--max-duration", "4"])
        captured = capsys.readouterr()
        assert "merge: 15 -> 8 entries" in captured.err
        assert "split: 8 -> " in captured.err

    def test_stats(self, srt_file, capsys):
        main([str(srt_file), "--max-gap", "0.2", "--stats"])
        captured = capsys.readouterr()
        assert "reduction: -7" in captured.err
        assert "Long entries" in captured.err

    def test_stats_after_chain_compare_with_loaded_track(self, srt_file, capsys):
        main([str(srt_file), "--mode", "merge", "--mode", "split",
              "--max-gap", "0.2", "--max-duration", "4", "--stats"])
        err = capsys.readouterr().err
        original = err[err.index("Original:"):err.index("Processed:")]
        assert "Entries:           15" in original
        assert "Change (net: " in err

    def test_sample(self, capsys):
        main(["--sample", "--max-gap", "0.2"])
        assert len(parse_srt(capsys.readouterr().out)) == 8

    def test_split_chars_escape(self, tmp_path, capsys):
        path = tmp_path / "lines.srt"
        path.write_text(
            "1\n00:00:00,000 --> 00:00:10,000\nFirst line\nSecond line\n",
            encoding="utf-8",
        )
        main([str(path), "--mode", "split", "--max-duration", "6", "--split-chars", "\\n"])
        captions = [e.caption for e in parse_srt(capsys.readouterr().out)]
        assert captions == ["First line", "Second line"]


class TestErrors:
    """Every user error exits with status 1."""

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.srt")])
        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_no_input(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1

    def test_nothing_parsed(self, tmp_path, capsys):
        path = tmp_path / "empty.srt"
        path.write_text("not subtitles\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1
        assert "No subtitle entries" in capsys.readouterr().err

    def test_bad_parameter(self, srt_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(srt_file), "--max-duration", "0"])
        assert exc_info.value.code == 1
        assert "max_duration" in capsys.readouterr().err

    def test_unwritable_output(self, srt_file, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(srt_file), "-o", str(tmp_path / "no" / "such" / "dir.srt")])
        assert exc_info.value.code == 1
