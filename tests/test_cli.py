import pytest

from bleichenbacher.__main__ import main


def test_small_scenario(capsys):
    main(["small", "--message", "hello"])
    out = capsys.readouterr().out
    assert "Recovered message: b'hello'" in out
    assert "Match ? True" in out


def test_failure_exits(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["small", "--bits", "255"])
    assert "Attack failed" in str(excinfo.value.code)


def test_unknown_scenario():
    with pytest.raises(SystemExit):
        main(["medium"])
