"""
Unit Tests for API Key Policy and Comparison
============================================
"""

import time
from unittest.mock import patch

import pytest

VALID_KEY = "Test123456789ABCDEF123456789abcdef"


class TestSanitize:
    """Tests for whitespace removal."""

    def test_removes_outer_and_inner_whitespace(self):
        """Should strip whitespace anywhere in the key."""
        from secure_server_fetch.api_keys import sanitize_api_key

        assert sanitize_api_key(" abc123 ") == "abc123"
        assert sanitize_api_key("abc 123") == "abc123"
        assert sanitize_api_key("a\tb\nc \r\n d") == "abcd"

    @pytest.mark.parametrize("raw", ["", "   ", " a b ", "\tKey\n With  Gaps ", VALID_KEY])
    def test_idempotent(self, raw):
        """Sanitizing twice should equal sanitizing once."""
        from secure_server_fetch.api_keys import sanitize_api_key

        once = sanitize_api_key(raw)
        assert sanitize_api_key(once) == once


class TestValidate:
    """Tests for the key strength policy."""

    def test_valid_key(self):
        """Should accept a long mixed key."""
        from secure_server_fetch.api_keys import validate_api_key, KeyValidationResult

        assert validate_api_key(VALID_KEY) == KeyValidationResult(is_valid=True)

    def test_short_key(self):
        """Should reject keys under 32 characters."""
        from secure_server_fetch.api_keys import validate_api_key, ERROR_TOO_SHORT

        result = validate_api_key("Test123")

        assert result.is_valid is False
        assert result.error == "API key must be at least 32 characters long"
        assert result.error == ERROR_TOO_SHORT

    @pytest.mark.parametrize("key", ["", "a", "!!!!", "A1b", "$" * 31, "é" * 20])
    def test_length_checked_first(self, key):
        """Short keys fail on length whatever characters they contain."""
        from secure_server_fetch.api_keys import validate_api_key, ERROR_TOO_SHORT

        assert validate_api_key(key).error == ERROR_TOO_SHORT

    def test_invalid_characters(self):
        """Should reject characters outside letters, digits, _ and -."""
        from secure_server_fetch.api_keys import validate_api_key, ERROR_INVALID_CHARACTERS

        result = validate_api_key("Test123456789ABCDEF123456789abcd!")

        assert result.is_valid is False
        assert result.error == ERROR_INVALID_CHARACTERS

    def test_characters_checked_before_complexity(self):
        """An all-lowercase key with a bad character reports the character rule."""
        from secure_server_fetch.api_keys import validate_api_key, ERROR_INVALID_CHARACTERS

        assert validate_api_key("a" * 40 + "*").error == ERROR_INVALID_CHARACTERS

    @pytest.mark.parametrize("key", [
        "test123456789abcdef123456789abcdef",
        "TEST123456789ABCDEF123456789ABCDEF",
        "TestABCDEFGHIJKLMNOPQRSTUVWXYZabcd",
    ])
    def test_missing_character_class(self, key):
        """Should reject keys without upper, lower and digit."""
        from secure_server_fetch.api_keys import validate_api_key

        assert validate_api_key(key).error == (
            "API key must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )

    def test_underscore_and_hyphen_allowed(self):
        """Should accept _ and - in an otherwise strong key."""
        from secure_server_fetch.api_keys import is_strong_api_key

        assert is_strong_api_key("sk_live-" + VALID_KEY) is True


class TestConstantTimeEqual:
    """Tests for fixed-time comparison."""

    @pytest.mark.parametrize("a, b, expected", [
        ("abc", "abc", True),
        (b"abc", b"abc", True),
        ("abc", "abd", False),
        ("abc", "abcd", False),
        ("", "", True),
        ("", "a", False),
        (VALID_KEY, VALID_KEY.lower(), False),
        ("abc", b"abc", True),
    ])
    def test_equality(self, a, b, expected):
        """Should match plain equality."""
        from secure_server_fetch.api_keys import constant_time_equal

        assert constant_time_equal(a, b) is expected

    def test_length_mismatch_runs_full_comparison(self):
        """A length mismatch should still compare the known value in full."""
        from secure_server_fetch.api_keys import compare

        with patch.object(compare.hmac, "compare_digest", return_value=True) as digest:
            assert compare.constant_time_equal("abcdef", "abc") is False

        digest.assert_called_once_with(b"abcdef", b"abcdef")

    @pytest.mark.timing
    def test_timing_independent_of_difference_position(self):
        """Early and late differences should take comparable time."""
        from secure_server_fetch.api_keys import constant_time_equal

        size = 1 << 20
        base = b"a" * size
        early = b"b" + b"a" * (size - 1)
        late = b"a" * (size - 1) + b"b"

        def elapsed(other):
            start = time.perf_counter_ns()
            constant_time_equal(base, other)
            return time.perf_counter_ns() - start

        for _ in range(10):  # warm-up
            elapsed(early)
            elapsed(late)

        # Interleaved, compared on the fastest run of each
        early_times, late_times = [], []
        for _ in range(200):
            early_times.append(elapsed(early))
            late_times.append(elapsed(late))

        ratio = min(early_times) / min(late_times)

        assert 0.5 < ratio < 2.0
