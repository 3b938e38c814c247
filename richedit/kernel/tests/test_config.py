"""
richedit Settings Tests

Integer settings are parsed from the environment; malformed or
out-of-range values raise RuntimeError.
"""

import pytest

from richedit.config import _env_int


class TestEnvInt:
    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("RICHEDIT_HISTORY_CAPACITY", raising=False)
        assert _env_int("RICHEDIT_HISTORY_CAPACITY", 30) == 30

    def test_reads_value(self, monkeypatch):
        monkeypatch.setenv("RICHEDIT_HISTORY_CAPACITY", "12")
        assert _env_int("RICHEDIT_HISTORY_CAPACITY", 30) == 12

    @pytest.mark.parametrize("raw", ["abc", "1.5", ""])
    def test_non_integer(self, monkeypatch, raw):
        monkeypatch.setenv("RICHEDIT_SETTLE_INTERVAL_MS", raw)
        with pytest.raises(RuntimeError, match="must be an integer"):
            _env_int("RICHEDIT_SETTLE_INTERVAL_MS", 350)

    @pytest.mark.parametrize("raw", ["0", "-3"])
    def test_below_minimum(self, monkeypatch, raw):
        monkeypatch.setenv("RICHEDIT_HISTORY_CAPACITY", raw)
        with pytest.raises(RuntimeError, match="at least 1"):
            _env_int("RICHEDIT_HISTORY_CAPACITY", 30)
