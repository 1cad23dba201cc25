# =============================================================================
# AGIP XP TRACKER - SEQUENCE PARSER & VALIDATOR UNIT TESTS
# =============================================================================

import pytest

from pairing.sequence import (
    SequenceGapError,
    SequenceParser,
    SequenceValidator,
    passed_sequence,
)
from shared.enums import GapReason


@pytest.fixture
def parser():
    return SequenceParser()


@pytest.fixture
def validator(parser):
    return SequenceValidator(parser=parser)


# =============================================================================
# PARSER
# =============================================================================


class TestSequenceParser:

    @pytest.mark.parametrize("title,expected", [
        ("[AGIP-142] Foo", 142),
        ("AGIP 142: Foo", 142),
        ("[agip142] Foo", 142),
        ("[AGIP - 9] Spaced", 9),
        ("No number here", None),
        ("", None),
    ])
    def test_extract(self, parser, title, expected):
        assert parser.extract(title) == expected

    def test_clean_title(self, parser):
        assert parser.clean_title("[AGIP-142] Foo") == "Foo"
        assert parser.clean_title("AGIP 142: Foo") == "AGIP 142: Foo"

    def test_ledger_key(self, parser):
        assert parser.ledger_key(142) == "agip_142"

    def test_mentions_does_not_match_longer_number(self, parser):
        assert parser.mentions("[AGIP-143] Bar", 143) is True
        assert parser.mentions("[AGIP-143] Bar", 14) is False

    def test_mentions_accepts_separator_runs(self, parser):
        assert parser.mentions("[AGIP - 143] Bar", 143) is True
        assert parser.mentions("[AGIP - 143] Bar", 14) is False

    def test_pair_number_comes_from_coreprop(self, parser, make_pair):
        assert parser.pair_number(make_pair(150)) == 150

    def test_passed_sequence_newest_first(self, parser, make_pair):
        rows = passed_sequence([make_pair(140), make_pair(150), make_pair(145)], parser)

        assert [row["agip_number"] for row in rows] == [150, 145, 140]
        assert rows[0]["title"] == "Add new wearables"
        assert rows[0]["full_coreprop_title"] == "[AGIP-150] Add new wearables"


# =============================================================================
# VALIDATOR
# =============================================================================


class TestSequenceValidator:

    def test_find_missing(self, validator):
        assert validator.find_missing([145, 144, 142]) == [143]

    def test_single_number_has_no_gaps(self, validator):
        assert validator.find_missing([145]) == []

    def test_no_pairs(self, validator):
        report = validator.validate([], [], [])

        assert report.numbers == []
        assert report.has_gaps is False

    def test_contiguous(self, validator, make_pair):
        pairs = [make_pair(n) for n in (142, 143, 144)]

        report = validator.validate(pairs, [], [])

        assert report.has_gaps is False
        assert report.lowest == 142
        assert report.highest == 144

    def test_single_gap_is_diagnostic(self, validator, make_pair):
        pairs = [make_pair(n) for n in (145, 144, 142)]

        report = validator.validate(pairs, [], [])

        assert report.missing == [143]
        assert report.recent_missing == [143]
        assert report.is_critical is False
        assert report.gaps[0].reason is GapReason.NEITHER_QUALIFIED

    def test_gap_classification(self, validator, make_pair, make_proposal):
        pairs = [make_pair(n) for n in (150, 146)]
        coreprops = [
            make_proposal(title="[AGIP-147] Matching failed"),
            make_proposal(title="[AGIP-148] Sigprop failed"),
        ]
        sigprops = [
            make_proposal(title="Signal for AGIP 147"),
            make_proposal(title="Signal for AGIP-149"),
        ]

        report = validator.validate(pairs, sigprops, coreprops, raise_on_critical=False)

        reasons = {gap.number: gap.reason for gap in report.gaps}
        assert reasons == {
            147: GapReason.MATCHING_FAILED,
            148: GapReason.SIGPROP_NOT_QUALIFIED,
            149: GapReason.COREPROP_NOT_QUALIFIED,
        }

    def test_gap_classification_spaced_tag(self, validator, make_pair, make_proposal):
        pairs = [make_pair(n) for n in (145, 144, 142)]
        coreprops = [make_proposal(title="[AGIP - 143] Fund the art program")]
        sigprops = [make_proposal(title="Signal for AGIP 143")]

        report = validator.validate(pairs, sigprops, coreprops)

        assert [gap.number for gap in report.gaps] == [143]
        assert report.gaps[0].reason is GapReason.MATCHING_FAILED

    def test_recent_gap_cluster_raises(self, validator, make_pair):
        pairs = [make_pair(n) for n in (150, 146, 145)]

        with pytest.raises(SequenceGapError) as exc_info:
            validator.validate(pairs, [], [])

        assert exc_info.value.report.recent_missing == [147, 148, 149]
        assert "147, 148, 149" in str(exc_info.value)

    def test_old_gaps_do_not_raise(self, validator, make_pair):
        pairs = [make_pair(n) for n in (150, 149, 148, 147, 146, 140)]

        report = validator.validate(pairs, [], [])

        assert report.missing == [141, 142, 143, 144, 145]
        assert report.recent_missing == []

    def test_report_to_dict(self, validator, make_pair):
        report = validator.validate([make_pair(10), make_pair(12)], [], [])

        data = report.to_dict()

        assert data["missing"] == [11]
        assert data["gaps"][0]["reason"] == "NEITHER_QUALIFIED"
