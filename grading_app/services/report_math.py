import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from grading_app.exceptions import GradingError
from grading_app.services.aggregation_math import (
    SIMPLE_AVERAGE, AggregationRule, FormativeBreakdown,
    aggregate_by_type, aggregate_scores, average_points, level_distribution,
)
from grading_app.services.scale_math import (
    CompositeResult, _field, composite, percentage_of,
)

logger = logging.getLogger(__name__)

GRADED = "GRADED"
UNGRADED = "UNGRADED"


@dataclass(frozen=True)
class LearnerMarks:
    learner_id: Any
    learning_area: str
    formative: tuple = ()
    summative: Any = None


@dataclass(frozen=True)
class ReportLine:
    learner_id: Any
    learning_area: str
    status: str
    result: CompositeResult | None = None
    reason: str = ""
    breakdown: tuple = ()

    @property
    def level(self):
        return self.result.level if self.result else None


@dataclass
class TermReport:
    lines: list = field(default_factory=list)

    @property
    def failed(self) -> list:
        return [line for line in self.lines if line.status == UNGRADED]

    @property
    def graded(self) -> list:
        return [line for line in self.lines if line.status == GRADED]

    def summary(self) -> dict:
        bands = [line.level for line in self.graded]
        return {
            "graded": len(self.graded),
            "ungraded": len(self.failed),
            "distribution": level_distribution(bands),
            "average_points": average_points(bands),
        }


def _summative_percentage(summative) -> int | float | None:
    if summative is None:
        return None
    if _field(summative, "max_score") is not None:
        return percentage_of(summative)
    return summative


def _formative(marks: LearnerMarks, strategy, n_value, type_rules) -> FormativeBreakdown:
    if type_rules is None:
        return FormativeBreakdown(
            average=aggregate_scores(marks.formative, strategy, n_value),
            total_assessments=len(marks.formative),
            strategy=strategy,
        )
    return aggregate_by_type(marks.formative, type_rules, AggregationRule(strategy, n_value))


def _grade(marks, weights, scale, strategy, n_value, type_rules):
    breakdown = _formative(marks, strategy, n_value, type_rules)
    formative = breakdown.average
    summative = _summative_percentage(marks.summative)

    if formative is not None and summative is not None:
        return composite(formative, summative, weights, scale), breakdown

    if formative is None and summative is None:
        return None, breakdown

    only = formative if formative is not None else summative
    single = composite(only, only, (1, 0), scale)
    return CompositeResult(
        formative_average=single.formative_average if formative is not None else None,
        summative_score=single.summative_score if summative is not None else None,
        weighted_score=single.weighted_score,
        level=single.level,
    ), breakdown


def grade_learner(marks: LearnerMarks, weights, scale, *,
                  strategy: str = SIMPLE_AVERAGE, n_value: int | None = None,
                  type_rules: Mapping[str, AggregationRule] | None = None) -> CompositeResult | None:
    """
    Composite result for one learner/learning area.

    - formative and summative present -> weighted composite
    - only one present                -> that component classified on its own
    - neither present                 -> None

    Without `type_rules` every formative mark is reduced with `strategy`.
    With `type_rules` marks are grouped by assessment type, each type uses
    its own rule (`strategy`/`n_value` for unconfigured types) and the type
    averages are combined by type weight.
    Engine errors propagate to the caller.
    """
    result, _ = _grade(marks, weights, scale, strategy, n_value, type_rules)
    return result


def build_term_report(rows: Iterable[LearnerMarks], weights, scale, *,
                      strategy: str = SIMPLE_AVERAGE, n_value: int | None = None,
                      type_rules: Mapping[str, AggregationRule] | None = None) -> TermReport:
    """
    Grade every learner line. A failure for one learner marks that line
    UNGRADED with the error message and the rest of the class is still
    graded; an ungraded line never carries a level.
    """
    report = TermReport()
    for marks in rows:
        try:
            result, formative = _grade(marks, weights, scale, strategy, n_value, type_rules)
        except GradingError as e:
            logger.warning(
                "Could not grade learner %s in %s: %s", marks.learner_id, marks.learning_area, e
            )
            report.lines.append(ReportLine(
                learner_id=marks.learner_id,
                learning_area=marks.learning_area,
                status=UNGRADED,
                reason=str(e),
            ))
            continue

        if result is None:
            report.lines.append(ReportLine(
                learner_id=marks.learner_id,
                learning_area=marks.learning_area,
                status=UNGRADED,
                reason="no marks",
            ))
            continue

        report.lines.append(ReportLine(
            learner_id=marks.learner_id,
            learning_area=marks.learning_area,
            status=GRADED,
            result=result,
            breakdown=formative.breakdown,
        ))
    return report
