from __future__ import annotations

import pytest

from vendor_cleanup.models import FileEntry, ModifiedFile, SeverityTier, severity_tier
from vendor_cleanup.similarity import common_characters, diff_percentage, similarity


@pytest.mark.parametrize("text", ["", "test content", "<?php\nreturn [];\n"])
def test_identical_strings_have_zero_difference(text: str) -> None:
    assert diff_percentage(text, text) == 0.0


def test_common_characters_recurses_on_both_sides() -> None:
    # "Wor" is the longest match, then "d" on its right.
    assert common_characters("World", "Word") == 4
    assert diff_percentage("World", "Word") == 11.1


def test_different_strings_report_a_percentage() -> None:
    diff = diff_percentage("Hello World", "Hello There")

    assert diff == 36.4
    assert 0.0 < diff < 100.0


def test_single_character_change() -> None:
    assert diff_percentage("CREATE TABLE x", "CREATE TABLE y") == 7.1


def test_nothing_in_common_is_a_full_difference() -> None:
    assert diff_percentage("abc", "") == 100.0
    assert diff_percentage("abc", "xyz") == 100.0
    assert similarity("abc", "xyz") == 0.0


def test_argument_order_does_not_change_simple_scores() -> None:
    assert diff_percentage("Hello World", "Hello There") == diff_percentage("Hello There", "Hello World")


@pytest.mark.parametrize(
    ("percentage", "tier"),
    [
        (0.0, SeverityTier.MINOR),
        (3.0, SeverityTier.MINOR),
        (5.0, SeverityTier.SMALL),
        (10.0, SeverityTier.SMALL),
        (20.0, SeverityTier.MODERATE),
        (29.9, SeverityTier.MODERATE),
        (30.0, SeverityTier.SIGNIFICANT),
        (50.0, SeverityTier.SIGNIFICANT),
    ],
)
def test_severity_tier_bands(percentage: float, tier: SeverityTier) -> None:
    assert severity_tier(percentage) is tier


def test_modified_file_reports_its_severity() -> None:
    modified = ModifiedFile(FileEntry.local("/app/config/app.php"), FileEntry.vendor("/v/config/app.php"), 12.5)

    assert modified.severity is SeverityTier.SMALL
