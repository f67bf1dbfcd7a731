"""Test patterns functionality."""

from webmux.patterns import capture_segment, inline_flags, left_anchor, regex_special


def test_patterns_regex_usage():
    """Test that all patterns are working correctly."""
    # Test capture_segment
    match = capture_segment.match(":name")
    assert match is not None
    assert match.group("name") == "name"
    assert capture_segment.match(":").group("name") == ""
    assert capture_segment.match("name") is None

    # Test inline_flags
    assert inline_flags.match("(?i)/abc").group() == "(?i)"
    assert inline_flags.match("(?P<x>a)") is None

    # Test left_anchor
    assert left_anchor.match("^/a")
    assert left_anchor.match(r"\A/a")
    assert left_anchor.match("/a") is None

    # Test regex_special
    assert regex_special.match("(")
    assert regex_special.match("/") is None
