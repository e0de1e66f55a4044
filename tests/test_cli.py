# tests/test_cli.py
"""
Command line and interactive prompt, driven through cli.main().

Run: pytest -v
"""

from __future__ import annotations

import random

import pytest

from athena import cli
from athena.fmt import ANSI_RE
from athena.puzzle import Difficulty, HiddenChallenge, PuzzleDefinition, PuzzleKind, generate_puzzle
from athena.workspace import ensure_workspace_seeded


def run(capsys, *argv):
    code = cli.main(["--no-color", *argv])
    out, err = capsys.readouterr()
    return code, out, err


def feed(monkeypatch, *lines):
    it = iter(lines)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(it))


# ---------- one-shot conversions ----------------------------------------------


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["roman", "1994"], "MCMXCIV"),
        (["1994", "roman"], "MCMXCIV"),
        (["mayan", "1994"], "•••• ———•••• ——••••"),
        (["binary", "0x0A"], "1 0 1 0"),
        (["babylonian", "60*60+1"], "𒁹 ␣ 𒁹"),
    ],
)
def test_convert_one_shot(capsys, argv, expected):
    code, out, _ = run(capsys, *argv)
    assert code == 0
    assert expected in out
    assert "How it is done" in out


def test_default_system_comes_from_profile(capsys):
    code, out, _ = run(capsys, "88")
    assert code == 0
    assert "LXXXVIII" in out


def test_no_trace_and_place_values(capsys):
    code, out, _ = run(capsys, "--no-trace", "mayan", "1994")
    assert code == 0
    assert "[4, 19, 14]" in out
    assert "1994 = 4×20² + 19×20¹ + 14×20⁰" in out
    assert "How it is done" not in out


def test_no_color_output_is_plain(capsys):
    _, out, _ = run(capsys, "roman", "12")
    assert not ANSI_RE.search(out)


@pytest.mark.parametrize(
    "argv, fragment",
    [
        (["nonexistent", "5"], "unknown numeral system"),
        (["roman", "0"], "no symbol for zero"),
        (["roman", "4000"], "3999"),
        (["mayan", "-1"], "non-negative"),
        (["roman", "3.5"], "not a whole number"),
        (["--profile", "nope", "5"], "unknown profile"),
    ],
)
def test_domain_errors_exit_2(capsys, argv, fragment):
    code, _, err = run(capsys, *argv)
    assert code == 2
    assert fragment in err


def test_max_value_from_profile(capsys):
    code, _, err = run(capsys, "--profile", "classroom", "binary", "2000000")
    assert code == 2
    assert "MAX_VALUE" in err


def test_mistyped_profile_setting_exit_2(capsys, isolated_workspace):
    ensure_workspace_seeded()
    (isolated_workspace / "profiles" / "typo.toml").write_text(
        "[PUZZLE]\nREVEAL_COUNT = \"three\"\n", encoding="utf-8"
    )
    code, _, err = run(capsys, "--profile", "typo", "puzzle", "roman", "--show-answer")
    assert code == 2
    assert "typo.toml: PUZZLE.REVEAL_COUNT must be an integer" in err


def test_classroom_profile_defaults_to_mayan(capsys):
    code, out, _ = run(capsys, "--profile", "classroom", "20")
    assert code == 0
    assert "Mayan Numerals" in out


# ---------- commands ----------------------------------------------------------


def test_list(capsys):
    code, out, _ = run(capsys, "list")
    assert code == 0
    for sid in ("roman", "mayan", "babylonian", "binary"):
        assert sid in out


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["decode", "roman", "MCMXCIV"], "1994"),
        (["decode", "mayan", "••••", "———••••", "——••••"], "1994"),
        (["decode", "XLII"], "42"),
        (["decode", "binary", "[1, 0, 1]"], "5"),
    ],
)
def test_decode(capsys, argv, expected):
    code, out, _ = run(capsys, *argv)
    assert code == 0
    assert expected in out


def test_decode_strict_and_lenient(capsys):
    code, _, err = run(capsys, "decode", "roman", "IIII")
    assert code == 2
    assert "canonical" in err
    code, out, _ = run(capsys, "--lenient", "decode", "roman", "IIII")
    assert code == 0
    assert "= 4" in out


def test_decode_without_text(capsys):
    code, _, _ = run(capsys, "decode")
    assert code == 2


def test_where_and_active(capsys, isolated_workspace):
    code, out, _ = run(capsys, "where")
    assert code == 0
    assert str(isolated_workspace.resolve()) in out
    assert "systems.toml" in out

    code, out, _ = run(capsys, "active")
    assert code == 0
    assert "Active profile: default" in out


def test_init(capsys, isolated_workspace):
    code, out, _ = run(capsys, "init")
    assert code == 0
    assert "Workspace ready at" in out
    assert (isolated_workspace / "profiles" / "classroom.toml").exists()


def test_init_overwrite_needs_dev_flag(capsys, monkeypatch, isolated_workspace):
    code, out, _ = run(capsys, "init", "overwrite")
    assert code == 2
    assert "ATHENA_DEV" in out

    monkeypatch.setenv("ATHENA_DEV", "1")
    code, out, _ = run(capsys, "init", "overwrite")
    assert code == 0
    assert (isolated_workspace / "data" / "systems.toml").exists()


# ---------- puzzles -----------------------------------------------------------


def test_puzzle_show_answer(capsys):
    code, out, _ = run(capsys, "puzzle", "roman", "--seed", "7", "--show-answer")
    assert code == 0
    assert "Decode puzzle" in out
    assert "Answer:" in out


def test_puzzle_answered_correctly(capsys, monkeypatch):
    rng = random.Random(7)
    expected = generate_puzzle("roman", Difficulty(1, 20), 3, kind="decode", distractor_count=3, rng=rng)
    feed(monkeypatch, "".join(expected.hidden.glyphs))
    code, out, _ = run(capsys, "puzzle", "roman", "--seed", "7", "--level", "easy",
                       "--reveal", "3", "--distractors", "3", "--kind", "decode")
    assert code == 0
    assert "Correct!" in out


def test_puzzle_number_from_question_is_wrong(capsys, monkeypatch):
    rng = random.Random(7)
    expected = generate_puzzle("roman", Difficulty(1, 20), 3, kind="decode", distractor_count=3, rng=rng)
    feed(monkeypatch, str(expected.hidden.value))
    code, out, _ = run(capsys, "puzzle", "roman", "--seed", "7", "--level", "easy",
                       "--reveal", "3", "--distractors", "3", "--kind", "decode")
    assert code == 0
    assert "Not quite." in out


def _roman_hundred():
    return PuzzleDefinition(
        system_id="roman",
        kind=PuzzleKind.DECODE,
        difficulty=Difficulty(1, 500),
        revealed=((10, ("X",)),),
        hidden=HiddenChallenge(100, ("C",), "glyphs"),
        distractors=(("X", "C"), ("C", "C"), ("C", "D")),
        distractor_values=(90, 200, 400),
        hint="",
    )


@pytest.mark.parametrize(
    "typed, expected",
    [
        ("c", True),     # Roman C, not option c)
        ("C", True),
        ("d", False),    # Roman D = 500, not option d)
        ("a", True),     # no numeral, so option a)
        ("b", False),
        ("z", False),
    ],
)
def test_read_answer_prefers_numerals_over_option_letters(monkeypatch, typed, expected):
    options = [("C",), ("X", "C"), ("C", "C"), ("C", "D")]
    feed(monkeypatch, typed)
    assert cli._read_answer(_roman_hundred(), options) is expected


def test_read_answer_letters_pick_number_options(monkeypatch):
    p = generate_puzzle("roman", Difficulty(1, 50), 3, kind="sequence", rng=5)
    options = p.options(rng=5)
    letter = "abcd"[options.index(p.answer)]
    feed(monkeypatch, letter)
    assert cli._read_answer(p, options) is True
    feed(monkeypatch, "")
    assert cli._read_answer(p, options) is None


def test_puzzle_answered_wrong_shows_hint(capsys, monkeypatch):
    feed(monkeypatch, "not a numeral")
    code, out, _ = run(capsys, "puzzle", "mayan", "--seed", "3", "--kind", "sequence")
    assert code == 0
    assert "Not quite." in out
    assert "increasing by" in out


def test_puzzle_range_flags(capsys):
    code, _, err = run(capsys, "puzzle", "roman", "--min", "1", "--max", "5", "--reveal", "10", "--show-answer")
    assert code == 2
    assert "holds only 5" in err

    code, _, err = run(capsys, "puzzle", "roman", "--min", "3", "--show-answer")
    assert code == 2
    assert "--min and --max" in err


# ---------- output file -------------------------------------------------------


def test_output_file_is_appended_without_ansi(capsys, isolated_workspace):
    cli.main(["roman", "12", "--output", "results/out.txt", "--quiet"])
    cli.main(["roman", "13", "--output", "results/out.txt", "--quiet"])
    out, _ = capsys.readouterr()
    assert out == ""
    text = (isolated_workspace / "results" / "out.txt").read_text(encoding="utf-8")
    assert "XII" in text and "XIII" in text
    assert not ANSI_RE.search(text)


def test_forbidden_output_file(capsys):
    code, _, err = run(capsys, "roman", "12", "--output", "evil.py")
    assert code == 1
    assert "--output" in err


# ---------- interactive prompt ------------------------------------------------


def test_repl_session(capsys, monkeypatch):
    feed(monkeypatch, "mayan", "1994", "20*20", "hist", "debug", "list", "q")
    code = cli.main(["--no-color"])
    out, _ = capsys.readouterr()
    assert code == 0
    assert "Numeral system: Mayan Numerals" in out
    assert "•••• ———•••• ——••••" in out
    assert "n=1994" in out and "n=400" in out
    assert "Debug is currently OFF." in out
    assert [h.n for h in cli.get_history()] == [1994, 400]


def test_repl_decode_trace_and_bad_input(capsys, monkeypatch):
    feed(monkeypatch, "trace off", "decode MMXXIV", "2024", "banana", "-5", "quit")
    code = cli.main(["--no-color"])
    out, err = capsys.readouterr()
    assert code == 0
    assert "MMXXIV = 2024" in out
    assert "How it is done" not in out
    assert "'banana'" in out
    assert "non-negative" in err


def test_repl_switches_profile(capsys, monkeypatch):
    feed(monkeypatch, "classroom", "q")
    code = cli.main(["--no-color"])
    out, _ = capsys.readouterr()
    assert code == 0
    assert "Applied profile: classroom" in out

    from athena import config  # noqa: PLC0415
    assert config.last_profile() == "classroom"


def test_repl_history_clear(capsys, monkeypatch):
    feed(monkeypatch, "12", "hist clear", "hist", "q")
    assert cli.main(["--no-color"]) == 0
    out, _ = capsys.readouterr()
    assert "History cleared." in out
    assert "History is empty." in out
    assert cli.get_history() == []


def test_repl_ends_on_eof(capsys, monkeypatch):
    def _eof(prompt=""):
        raise EOFError
    monkeypatch.setattr("builtins.input", _eof)
    assert cli.main(["--no-color"]) == 0


# ---------- helpers -----------------------------------------------------------


@pytest.mark.parametrize(
    "items, expected",
    [
        ([], (None, None)),
        (["42"], (None, 42)),
        (["mayan"], ("mayan", None)),
        (["mayan", "42"], ("mayan", 42)),
        (["42", "mayan"], ("mayan", 42)),
        (["1", "2"], (None, 1)),
        (["mayan", "roman"], ("mayan", None)),
    ],
)
def test_resolve_inputs(items, expected):
    assert cli._resolve_inputs(items) == expected
