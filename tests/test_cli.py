import warnings

import pytest
from quick_evaluate import build_parser, main


def run(capsys, *argv):
    main(list(argv))
    return capsys.readouterr()


def test_explicit_word(capsys):
    captured = run(capsys, "-p", "64", "-z", "2", "0", "--word", "ab")
    lines = captured.out.splitlines()
    assert len(lines) == 6
    assert lines[2].startswith("trace = (-4.618802153517")
    assert lines[5] == "classification = hyperbolic"
    assert captured.err == ""


def test_identity_word_warns_on_stderr(capsys):
    captured = run(capsys, "-p", "64", "-z", "2", "0", "--word", "aA")
    assert captured.err.startswith("Warning:")
    assert "increase precision" in captured.err
    assert "dominant_eigenvector = undefined" in captured.out
    assert "classification = trivial" in captured.out


def test_low_precision_warns_on_stderr(capsys):
    captured = run(capsys, "-p", "16", "-z", "0.3", "1.1", "--word", "ab" * 30)
    assert captured.err.startswith("Warning:")
    assert "increase precision" in captured.err
    assert len(captured.out.splitlines()) == 6


def test_main_leaves_warning_filters_alone(capsys):
    before = list(warnings.filters)
    run(capsys, "-p", "64", "-z", "2", "0", "--word", "aA")
    assert warnings.filters == before


def test_rational_infinity_is_generator_b(capsys):
    out = run(capsys, "-p", "64", "-z", "2", "0", "-r", "1", "0", "--digits", "6").out
    assert "trace = (-4.0 + 0.0j)" in out


def test_rational_matches_explicit_word(capsys):
    rational = run(capsys, "-p", "96", "-z", "0.3", "1.1", "-r", "2", "3", "--digits", "12").out
    explicit = run(capsys, "-p", "96", "-z", "0.3", "1.1", "--word", "aabab", "--digits", "12").out
    assert rational == explicit


def test_random_runs_are_reproducible(capsys):
    args = ("-p", "80", "--random-z", "--random-word", "12", "--seed", "5", "--verbose")
    first = run(capsys, *args).out
    second = run(capsys, *args).out
    assert first == second
    assert "word = " in first
    assert "precision = 80 bits" in first


def test_verbose_rational_shows_target(capsys):
    out = run(capsys, "-p", "64", "-z", "2", "0", "-r", "4", "6", "--verbose").out
    assert "target = 2/3" in out


@pytest.mark.parametrize("argv", [
    ["-p", "64", "-z", "2", "0"],                                   # no word mode
    ["-p", "64", "--word", "ab"],                                   # no parameter
    ["-z", "2", "0", "--word", "ab"],                               # no precision
    ["-p", "64", "-z", "2", "0", "--random-z", "--word", "ab"],     # two parameters
    ["-p", "64", "-z", "2", "0", "--word", "ab", "-r", "1", "2"],   # two word modes
    ["-p", "0", "-z", "2", "0", "--word", "ab"],
    ["-p", "64", "-z", "2", "0", "--word", "abc"],
    ["-p", "64", "-z", "2", "0", "-r", "-1", "2"],
])
def test_bad_arguments_exit_with_usage_error(capsys, argv):
    with pytest.raises(SystemExit) as info:
        main(argv)
    assert info.value.code == 2


@pytest.mark.parametrize("argv", [
    ["-p", "64", "-z", "1", "0", "--word", "ab"],
    ["-p", "64", "-z", "-1", "0", "--word", "ab"],
    ["-p", "64", "-z", "2", "0", "--random-word", "0"],
])
def test_computation_errors_exit_with_status_one(capsys, argv):
    with pytest.raises(SystemExit) as info:
        main(argv)
    assert info.value.code == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_parser_defaults():
    args = build_parser().parse_args(["-p", "64", "--random-z", "--random-word", "3"])
    assert args.seed == 2
    assert args.digits is None
    assert args.z is None
