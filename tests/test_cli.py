"""Tests for the headless match runner."""

import pytest

from grim.cli import main


def test_single_match(capsys):
    assert main(["--deals", "2", "--seed", "cli"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("match 1: seed=cli NS: ")
    assert "matches:" not in out


def test_same_seed_same_output(capsys):
    main(["--deals", "3", "--seed", "repeat"])
    first = capsys.readouterr().out
    main(["--deals", "3", "--seed", "repeat"])
    assert capsys.readouterr().out == first


def test_several_matches(capsys):
    assert main(["--deals", "1", "--seed", "many", "--games", "3"]) == 0
    out = capsys.readouterr().out
    assert "seed=many-0" in out
    assert "seed=many-2" in out
    assert "3 matches: NS=" in out


def test_event_log(capsys):
    main(["--deals", "1", "--seed", "log", "--log"])
    out = capsys.readouterr().out
    assert out.startswith("New match started\n")
    assert "Game over!" in out


def test_rejects_zero_deals():
    with pytest.raises(SystemExit) as exc:
        main(["--deals", "0"])
    assert exc.value.code == 2
