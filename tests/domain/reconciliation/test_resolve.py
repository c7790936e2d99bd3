from __future__ import annotations

from propmerge.domain.model import Provider
from propmerge.domain.reconciliation import FieldCandidate, SourcePriorityPolicy, resolve_field
from propmerge.domain.reconciliation.resolve import rank_candidates


def _candidate(source: Provider, value: object, confidence: float) -> FieldCandidate[object]:
    return FieldCandidate(source=source, value=value, confidence=confidence)


def test_priority_list_beats_confidence() -> None:
    resolved = resolve_field(
        "yearBuilt",
        [
            _candidate(Provider.ZILLOW, 2001, 0.95),
            _candidate(Provider.COUNTY_ASSESSOR, 1998, 0.9),
        ],
    )

    assert resolved.value == 1998
    assert resolved.source is Provider.COUNTY_ASSESSOR
    assert resolved.confidence == 0.9


def test_absent_candidates_are_skipped() -> None:
    resolved = resolve_field(
        "yearBuilt",
        [
            _candidate(Provider.COUNTY_ASSESSOR, None, 0.9),
            _candidate(Provider.REDFIN, 2001, 0.4),
        ],
    )

    assert resolved.value == 2001
    assert resolved.source is Provider.REDFIN


def test_no_present_candidate_resolves_to_explicit_absence() -> None:
    resolved = resolve_field("zoning", [_candidate(Provider.COUNTY_ASSESSOR, None, 0.9)])

    assert resolved.value is None
    assert resolved.source is None
    assert resolved.confidence == 0.0


def test_unlisted_sources_fall_back_to_confidence() -> None:
    policy = SourcePriorityPolicy(default=(Provider.COUNTY_ASSESSOR,))

    resolved = resolve_field(
        "walkScore",
        [
            _candidate(Provider.ZILLOW, 60, 0.5),
            _candidate(Provider.REDFIN, 72, 0.8),
        ],
        policy=policy,
    )

    assert resolved.value == 72
    assert resolved.source is Provider.REDFIN


def test_listed_sources_rank_ahead_of_unlisted_ones() -> None:
    policy = SourcePriorityPolicy(priorities={"hoa": (Provider.REDFIN,)})

    ranked = rank_candidates(
        "hoa",
        [
            _candidate(Provider.ZILLOW, 200, 0.99),
            _candidate(Provider.COUNTY_ASSESSOR, 180, 0.7),
            _candidate(Provider.REDFIN, 150, 0.1),
        ],
        policy=policy,
    )

    assert [candidate.source for candidate in ranked] == [
        Provider.REDFIN,
        Provider.ZILLOW,
        Provider.COUNTY_ASSESSOR,
    ]


def test_falsy_but_present_values_still_win() -> None:
    resolved = resolve_field(
        "bedrooms",
        [
            _candidate(Provider.COUNTY_ASSESSOR, 0, 0.9),
            _candidate(Provider.ZILLOW, 3, 0.9),
        ],
    )

    assert resolved.value == 0
    assert resolved.source is Provider.COUNTY_ASSESSOR
