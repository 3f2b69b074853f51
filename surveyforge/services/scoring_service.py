"""응답 점수 합산과 점수 -> 결과(Outcome) 매칭 로직입니다.

DB에 의존하지 않는 순수 함수로 구성되어 있어 제출 서비스와 테스트에서 그대로 사용합니다.

매칭 규칙:
  * 결과 구간은 min_score 오름차순(None 우선, 같은 값은 작성 순서 유지)으로 스캔한다.
  * min_score <= total <= max_score 를 만족하는 첫 구간이 선택된다.
    구간이 겹치면 min_score 가 가장 낮은 결과가 이긴다.
  * min_score/max_score 가 None 이면 각각 -inf / +inf 로 본다.
  * strict 정책은 매칭이 없으면 None, closest_below 정책은 total 이하 중
    min_score 가 가장 큰 결과, 그것도 없으면 min_score 가 가장 작은 결과로 대체한다.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

STRICT = "strict"
CLOSEST_BELOW = "closest_below"


@dataclass(frozen=True)
class AnswerSelection:
    question_id: int
    option_scores: Sequence[int] = field(default_factory=tuple)


@dataclass(frozen=True)
class OutcomeRange:
    title: str
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    description: Optional[str] = None
    redirect_url: Optional[str] = None
    outcome_id: Optional[int] = None

    @classmethod
    def from_model(cls, row) -> "OutcomeRange":
        return cls(
            title=row.title,
            min_score=row.min_score,
            max_score=row.max_score,
            description=row.description,
            redirect_url=row.redirect_url,
            outcome_id=row.outcome_id,
        )

    def contains(self, total: int) -> bool:
        if self.min_score is not None and total < self.min_score:
            return False
        if self.max_score is not None and total > self.max_score:
            return False
        return True


def _as_int(value) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def aggregate_score(selections: Iterable[AnswerSelection]) -> int:
    total = 0
    for selection in selections or []:
        scores = getattr(selection, "option_scores", None)
        if not scores:
            continue
        if isinstance(scores, (str, bytes)):
            continue
        try:
            iterator = iter(scores)
        except TypeError:
            continue
        total += sum(_as_int(score) for score in iterator)
    return total


def build_selections(questions, answers: dict[int, list[int]]) -> list[AnswerSelection]:
    """문항별 선택한 option_id 목록을 작성자가 정의한 점수 목록으로 변환한다."""
    selections = []
    for question in questions:
        selected_ids = set(answers.get(int(question.question_id), []))
        scores = tuple(
            int(option.score or 0)
            for option in question.options
            if int(option.option_id) in selected_ids
        )
        selections.append(AnswerSelection(question_id=int(question.question_id), option_scores=scores))
    return selections


def _min_key(outcome: OutcomeRange) -> float:
    return float("-inf") if outcome.min_score is None else outcome.min_score


def order_outcomes(outcomes: Iterable[OutcomeRange]) -> list[OutcomeRange]:
    # sorted 는 stable 하므로 같은 min_score 는 작성 순서를 유지한다.
    return sorted(outcomes or [], key=_min_key)


def resolve_outcome(
    total: int,
    outcomes: Iterable[OutcomeRange],
    policy: str = STRICT,
) -> Optional[OutcomeRange]:
    ordered = order_outcomes(outcomes)
    if not ordered:
        return None

    for outcome in ordered:
        if outcome.contains(total):
            return outcome

    if policy != CLOSEST_BELOW:
        return None

    below = [row for row in ordered if _min_key(row) <= total]
    if below:
        best = max(_min_key(row) for row in below)
        return next(row for row in below if _min_key(row) == best)
    return ordered[0]
