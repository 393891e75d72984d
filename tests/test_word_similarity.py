"""
End-to-end tests for the command line entry point.
"""

import pytest

from word_similarity import main, resolve_mode


def _run(*args):
    return main([*map(str, args), "--no-progress"])


class TestMain:
    def test_animals(self, tmp_path, write_lines, capsys):
        out = tmp_path / "out.txt"
        assert _run(write_lines(["cat", "cot", "dog"]), out, "-m", "50") == 0
        assert out.read_text(encoding="utf-8") == "Row 1: cat\tRow 2: cot\tSimilarity: 66.67%\n"
        assert "Time elapsed" in capsys.readouterr().out

    def test_case_insensitive(self, tmp_path, write_lines):
        out = tmp_path / "out.txt"
        assert _run(write_lines(["Cat", "cat"]), out, "--min-match", "100") == 0
        assert out.read_text(encoding="utf-8") == "Row 1: Cat\tRow 2: cat\tSimilarity: 100.00%\n"

    def test_default_threshold_is_80_percent(self, tmp_path, write_lines):
        out = tmp_path / "out.txt"
        # "apple"/"apples" is 83.33%, "apple"/"apply" is exactly 80%, "cat"/"cot" is 66.67%
        assert _run(write_lines(["apple", "apples", "apply", "cat", "cot"]), out) == 0
        lines = out.read_text(encoding="utf-8").splitlines()
        assert lines == [
            "Row 1: apple\tRow 2: apples\tSimilarity: 83.33%",
            "Row 1: apple\tRow 3: apply\tSimilarity: 80.00%",
        ]

    def test_env_threshold(self, tmp_path, write_lines, monkeypatch):
        monkeypatch.setenv("WORDSIM_MIN_MATCH", "60")
        out = tmp_path / "out.txt"
        assert _run(write_lines(["cat", "cot", "dog"]), out) == 0
        assert out.read_text(encoding="utf-8").count("\n") == 1

    def test_bad_env_threshold_falls_back(self, tmp_path, write_lines, monkeypatch):
        monkeypatch.setenv("WORDSIM_MIN_MATCH", "lots")
        out = tmp_path / "out.txt"
        assert _run(write_lines(["cat", "cot", "dog"]), out) == 0
        assert out.read_text(encoding="utf-8") == ""

    @pytest.mark.parametrize("mode", ["dense", "streaming", "auto"])
    @pytest.mark.parametrize("kernel", ["rapidfuzz", "levenshtein", "jellyfish", "editdistance"])
    def test_modes_and_kernels_agree(self, tmp_path, write_lines, mode, kernel):
        words = write_lines(["kitten", "sitting", "mitten", "Kitten", "smitten", "bitten", "fitting"])
        expected = tmp_path / "expected.txt"
        actual = tmp_path / "actual.txt"
        assert _run(words, expected, "-m", "40", "--mode", "dense") == 0
        assert _run(words, actual, "-m", "40", "--mode", mode, "--kernel", kernel, "-j", "3", "--block-size", "2") == 0
        assert actual.read_bytes() == expected.read_bytes()

    def test_idempotent(self, tmp_path, write_lines):
        words = write_lines(["aa", "ab", "ba", "bb", "aa", "abc", "bca"])
        first, second = tmp_path / "first.txt", tmp_path / "second.txt"
        assert _run(words, first, "-m", "0", "-j", "4", "--block-size", "1") == 0
        assert _run(words, second, "-m", "0", "-j", "2") == 0
        assert first.read_bytes() == second.read_bytes()
        assert first.read_text(encoding="utf-8").count("\n") == 21

    def test_output_sorted_descending(self, tmp_path, write_lines):
        out = tmp_path / "out.txt"
        assert _run(write_lines(["alpha", "alpine", "alps", "aleph", "halpha", "alpha"]), out, "-m", "0") == 0
        percents = [float(line.rsplit(" ", 1)[1].rstrip("%")) for line in out.read_text(encoding="utf-8").splitlines()]
        assert percents == sorted(percents, reverse=True)


class TestMainErrors:
    def test_missing_input(self, tmp_path, capsys):
        assert _run(tmp_path / "missing.txt", tmp_path / "out.txt") == 1
        assert "Error" in capsys.readouterr().err
        assert not (tmp_path / "out.txt").exists()

    def test_empty_line(self, tmp_path, write_lines, capsys):
        out = tmp_path / "out.txt"
        assert _run(write_lines(["one", "", "two"]), out) == 1
        assert "Empty lines" in capsys.readouterr().err
        assert not out.exists()

    def test_too_few_words(self, tmp_path, write_lines, capsys):
        assert _run(write_lines(["solo"]), tmp_path / "out.txt") == 1
        assert "Invalid number of words: 1" in capsys.readouterr().err

    def test_unwritable_output(self, tmp_path, write_lines, capsys):
        out = tmp_path / "missing-dir" / "out.txt"
        assert _run(write_lines(["cat", "cot"]), out) == 1
        assert "Error writing output file" in capsys.readouterr().err

    def test_invalid_workers(self, tmp_path, write_lines):
        with pytest.raises(SystemExit) as exc_info:
            _run(write_lines(["cat", "cot"]), tmp_path / "out.txt", "-j", "0")
        assert exc_info.value.code == 2

    def test_missing_arguments(self):
        with pytest.raises(SystemExit):
            main([])


class TestResolveMode:
    def test_auto_small_is_dense(self):
        assert resolve_mode("auto", 100, 4096) == "dense"

    def test_auto_at_limit_is_dense(self):
        assert resolve_mode("auto", 4096, 4096) == "dense"

    def test_auto_large_streams(self):
        assert resolve_mode("auto", 4097, 4096) == "streaming"

    @pytest.mark.parametrize("mode", ["dense", "streaming"])
    def test_explicit_mode_wins(self, mode):
        assert resolve_mode(mode, 10, 1) == mode
