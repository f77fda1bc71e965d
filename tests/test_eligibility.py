import pytest

from app.core.eligibility import (
    eligible_position_types,
    rankable_position_types,
    is_application_window_open,
    is_sports_culture_management_window_open,
)
from app.models.enums import AllocationPhase, AllocationRound


@pytest.mark.parametrize("round_,expected", [
    ("maincomm", {"maincomm", "blockcomm"}),
    ("subcomm", {"subcomm", "blockcomm", "maincomm"}),
    ("inactive", {"inactive"}),
    ("complete", {"complete"}),
    (AllocationRound.maincomm, {"maincomm", "blockcomm"}),
    (AllocationRound.inactive, {"inactive"}),
])
def test_eligible_position_types(round_, expected):
    assert eligible_position_types(round_) == expected


def test_eligible_position_types_returns_a_fresh_set():
    types = eligible_position_types("maincomm")
    types.add("lead")
    assert eligible_position_types("maincomm") == {"maincomm", "blockcomm"}


@pytest.mark.parametrize("round_", ["lead", "vice"])
def test_rankable_types_never_include_chair_roles(round_):
    assert eligible_position_types(round_) == {round_}
    assert rankable_position_types(round_) == set()


def test_rankable_types_for_subcomm_round():
    assert rankable_position_types("subcomm") == {"subcomm", "blockcomm", "maincomm"}


@pytest.mark.parametrize("phase", list(AllocationPhase))
def test_application_window(phase):
    expected = phase == AllocationPhase.subcomm_concurrent_ranking
    assert is_application_window_open(phase) is expected
    assert is_application_window_open(phase.value) is expected


def test_application_window_opens_in_exactly_one_phase():
    assert len(AllocationPhase) == 9
    assert sum(is_application_window_open(p) for p in AllocationPhase) == 1


@pytest.mark.parametrize("phase", list(AllocationPhase))
def test_management_window(phase):
    expected = phase in (
        AllocationPhase.subcomm_results_processing,
        AllocationPhase.full_results_available,
    )
    assert is_sports_culture_management_window_open(phase) is expected
    assert is_sports_culture_management_window_open(phase.value) is expected


def test_unknown_phase_closes_both_windows():
    assert not is_application_window_open("holiday")
    assert not is_sports_culture_management_window_open("holiday")
