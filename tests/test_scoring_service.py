from types import SimpleNamespace

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from surveyforge.services.scoring_service import (
    CLOSEST_BELOW,
    STRICT,
    AnswerSelection,
    OutcomeRange,
    aggregate_score,
    build_selections,
    order_outcomes,
    resolve_outcome,
)

LOW_HIGH = [
    OutcomeRange(title="Low", min_score=0, max_score=5),
    OutcomeRange(title="High", min_score=6, max_score=10),
]

# ---------------------------------------------------------------------------
# Shared strategies
# ---------------------------------------------------------------------------

score_st = st.integers(min_value=-1000, max_value=1000)


@st.composite
def selections_st(draw):
    """문항별로 0개 이상 선택된 점수 목록."""
    count = draw(st.integers(min_value=0, max_value=8))
    return [
        AnswerSelection(question_id=idx + 1, option_scores=tuple(draw(st.lists(score_st, max_size=4))))
        for idx in range(count)
    ]


@st.composite
def outcome_st(draw):
    low = draw(st.one_of(st.none(), score_st))
    high = draw(st.one_of(st.none(), score_st))
    if low is not None and high is not None and low > high:
        low, high = high, low
    return OutcomeRange(title=draw(st.text(min_size=1, max_size=8)), min_score=low, max_score=high)


# ---------------------------------------------------------------------------
# Score aggregation
# ---------------------------------------------------------------------------

@settings(max_examples=200)
@given(selections=selections_st())
def test_total_equals_sum_of_selected_scores(selections):
    expected = sum(score for selection in selections for score in selection.option_scores)
    assert aggregate_score(selections) == expected


def test_unanswered_questions_contribute_zero():
    selections = [
        AnswerSelection(question_id=1, option_scores=(3,)),
        AnswerSelection(question_id=2),
        AnswerSelection(question_id=3, option_scores=()),
    ]
    assert aggregate_score(selections) == 3


def test_multi_select_contributes_every_selected_score():
    assert aggregate_score([AnswerSelection(question_id=1, option_scores=(2, 4, -1))]) == 5


def test_malformed_scores_count_as_zero():
    selections = [
        AnswerSelection(question_id=1, option_scores=(None, "7", 2.5, True, 4.0, 1)),
        AnswerSelection(question_id=2, option_scores="12"),
        AnswerSelection(question_id=3, option_scores=None),
    ]
    assert aggregate_score(selections) == 5


def test_aggregate_of_nothing_is_zero():
    assert aggregate_score([]) == 0
    assert aggregate_score(None) == 0


def test_build_selections_uses_stored_option_scores():
    questions = [
        SimpleNamespace(
            question_id=1,
            options=[SimpleNamespace(option_id=10, score=2), SimpleNamespace(option_id=11, score=5)],
        ),
        SimpleNamespace(
            question_id=2,
            options=[SimpleNamespace(option_id=20, score=1), SimpleNamespace(option_id=21, score=3)],
        ),
        SimpleNamespace(question_id=3, options=[SimpleNamespace(option_id=30, score=9)]),
    ]
    selections = build_selections(questions, {1: [11], 2: [20, 21]})

    assert [row.option_scores for row in selections] == [(5,), (1, 3), ()]
    assert aggregate_score(selections) == 9


# ---------------------------------------------------------------------------
# Outcome resolution
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "total, expected",
    [(0, "Low"), (5, "Low"), (6, "High"), (7, "High"), (10, "High")],
)
def test_total_inside_a_range_resolves_to_it(total, expected):
    assert resolve_outcome(total, LOW_HIGH).title == expected


def test_out_of_range_total_is_no_match_under_strict():
    assert resolve_outcome(100, LOW_HIGH) is None
    assert resolve_outcome(100, LOW_HIGH, STRICT) is None
    assert resolve_outcome(-3, LOW_HIGH, STRICT) is None


def test_closest_below_falls_back_to_greatest_lower_bound():
    assert resolve_outcome(100, LOW_HIGH, CLOSEST_BELOW).title == "High"


def test_closest_below_uses_smallest_range_when_total_is_below_everything():
    assert resolve_outcome(-3, LOW_HIGH, CLOSEST_BELOW).title == "Low"


def test_gap_between_ranges():
    gapped = [
        OutcomeRange(title="Low", min_score=0, max_score=3),
        OutcomeRange(title="High", min_score=8, max_score=10),
    ]
    assert resolve_outcome(5, gapped, STRICT) is None
    assert resolve_outcome(5, gapped, CLOSEST_BELOW).title == "Low"


@pytest.mark.parametrize("policy", [STRICT, CLOSEST_BELOW])
def test_empty_outcome_list_is_no_match(policy):
    assert resolve_outcome(42, [], policy) is None
    assert resolve_outcome(42, None, policy) is None


def test_overlap_prefers_lowest_min_score_regardless_of_author_order():
    outcomes = [
        OutcomeRange(title="Wide", min_score=3, max_score=20),
        OutcomeRange(title="Narrow", min_score=0, max_score=10),
    ]
    assert resolve_outcome(5, outcomes).title == "Narrow"


def test_equal_min_scores_keep_author_order():
    outcomes = [
        OutcomeRange(title="First", min_score=0, max_score=10),
        OutcomeRange(title="Second", min_score=0, max_score=10),
    ]
    assert resolve_outcome(5, outcomes).title == "First"


def test_open_ended_ranges():
    outcomes = [
        OutcomeRange(title="Anything up to 3", max_score=3),
        OutcomeRange(title="Four and up", min_score=4),
    ]
    assert resolve_outcome(-500, outcomes).title == "Anything up to 3"
    assert resolve_outcome(10_000, outcomes).title == "Four and up"


def test_order_outcomes_puts_unbounded_minimum_first():
    ordered = order_outcomes(
        [
            OutcomeRange(title="b", min_score=5),
            OutcomeRange(title="a", min_score=None, max_score=1),
            OutcomeRange(title="c", min_score=-2),
        ]
    )
    assert [row.title for row in ordered] == ["a", "c", "b"]


@settings(max_examples=300)
@given(outcome=outcome_st(), total=score_st)
def test_single_containing_range_is_returned(outcome, total):
    assume(outcome.contains(total))
    assert resolve_outcome(total, [outcome]) == outcome


@st.composite
def overlapping_pair_st(draw):
    """total 을 함께 포함하면서 min_score 가 서로 다른 두 구간."""
    total = draw(score_st)
    below = st.integers(min_value=-2000, max_value=total)
    above = st.integers(min_value=total, max_value=2000)
    first_min, second_min = draw(st.lists(below, min_size=2, max_size=2, unique=True))
    first = OutcomeRange(title="first", min_score=first_min, max_score=draw(above))
    second = OutcomeRange(title="second", min_score=second_min, max_score=draw(above))
    return first, second, total


@settings(max_examples=300)
@given(pair=overlapping_pair_st())
def test_overlap_resolves_to_lower_min(pair):
    first, second, total = pair
    expected = first if first.min_score < second.min_score else second
    assert resolve_outcome(total, [first, second]) == expected
    assert resolve_outcome(total, [second, first]) == expected


@settings(max_examples=300)
@given(outcomes=st.lists(outcome_st(), max_size=6), total=score_st)
def test_resolution_never_raises_and_returns_a_member(outcomes, total):
    for policy in (STRICT, CLOSEST_BELOW):
        result = resolve_outcome(total, outcomes, policy)
        if result is not None:
            assert result in outcomes
    strict = resolve_outcome(total, outcomes, STRICT)
    if strict is not None:
        assert strict.contains(total)
    if outcomes:
        assert resolve_outcome(total, outcomes, CLOSEST_BELOW) is not None
