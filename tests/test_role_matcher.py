"""
Tests for role-group pattern matching and role-code normalization
"""

import pytest

from efiling.services.role_matcher import matches, normalize_role_codes, pattern_matches


class TestMatches:
    @pytest.mark.parametrize(
        "role_code,patterns,expected",
        [
            ("EEXEN", ["EE*"], True),
            ("XEE", ["EE*"], False),
            ("SEEXEN", ["EE"], True),
            ("XX", ["EE"], False),
            ("EEXEN_SAF", ["EEXEN_SAF"], True),
            ("EEXEN_SAFX", ["EEXEN_SAF"], False),
            ("eexen", ["EE*"], True),
            ("DIR", ["dir"], True),
            ("CLERK", ["EE*", "DIR"], False),
            ("DIR", ["EE*", "DIR"], True),
        ],
    )
    def test_pattern_rules(self, role_code, patterns, expected):
        assert matches(role_code, patterns) is expected

    def test_short_code_longer_than_four_needs_exact_match(self):
        # Five characters is past the substring threshold
        assert matches("XEEXENX", ["EEXEN"]) is False
        assert matches("EEXEN", ["EEXEN"]) is True

    @pytest.mark.parametrize("role_code", [None, "", "   "])
    def test_missing_role_code_never_matches(self, role_code):
        assert matches(role_code, ["EE*", "DIR"]) is False

    def test_blank_patterns_are_ignored(self):
        assert matches("EEXEN", ["", "  "]) is False
        assert matches("EEXEN", []) is False
        assert matches("EEXEN", None) is False

    def test_patterns_may_be_stored_as_strings(self):
        assert matches("SEEXEN", "DIR, EE") is True
        assert matches("SEEXEN", '["DIR", "EE*"]') is False
        assert matches("EEXEN", '["DIR", "EE*"]') is True

    def test_bare_star_matches_any_role(self):
        assert pattern_matches("CLERK", "*") is True


class TestNormalizeRoleCodes:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (["EE*", " DIR "], ["EE*", "DIR"]),
            ('["EE*", "DIR"]', ["EE*", "DIR"]),
            ("EE*, DIR,,", ["EE*", "DIR"]),
            ("", []),
            (None, []),
            (["", None, "SE"], ["SE"]),
            ("[EE*, DIR]", ["EE*", "DIR"]),
        ],
    )
    def test_normalization(self, value, expected):
        assert normalize_role_codes(value) == expected
