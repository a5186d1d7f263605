from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from grading_app.exceptions import GradingError
from grading_app.serializers.grading_serializer import (
    CompositeRequestSerializer, CompositeResultSerializer,
    ReportLineSerializer, TermReportRequestSerializer,
)
from grading_app.services import scale_math
from grading_app.services.aggregation_math import MULTI_TYPE_WEIGHTED, FormativeMark
from grading_app.services.report_math import LearnerMarks, build_term_report
from grading_app.services.scale_lookup import (
    resolve_aggregation_config, resolve_scale, resolve_term_weights, resolve_type_rules,
)
from grading_app.utils import grading_error_payload


def _weights_for(data):
    if "formative_weight" in data:
        return scale_math.Weights.from_percentages(data["formative_weight"], data["summative_weight"])
    return resolve_term_weights(data["academic_year"], data["term"])


def _scale_for(data):
    if "scale" in data:
        return data["scale"]
    return resolve_scale(data.get("grade", ""), data.get("learning_area", ""))


def _learner_marks(row) -> LearnerMarks:
    summative = row.get("summative")
    return LearnerMarks(
        learner_id=row["learner_id"],
        learning_area=row.get("learning_area", ""),
        formative=tuple(FormativeMark(**mark) for mark in row.get("formative", [])),
        summative=scale_math.ScoreEntry(**summative) if summative else None,
    )


class GradingViewSet(viewsets.ViewSet):
    """
    • POST /grading/composite/     → weighted formative/summative level for one learner
    • POST /grading/term-report/   → composite levels for a class; failures are listed, not fatal

    Both take scale_id, or grade / learning_area to use the most specific active scale.
    """

    @action(detail=False, methods=["post"], url_path="composite")
    def composite(self, request):
        req = CompositeRequestSerializer(data=request.data)
        req.is_valid(raise_exception=True)
        data = req.validated_data

        try:
            result = scale_math.composite(
                data["formative_average"],
                data["summative_score"],
                _weights_for(data),
                _scale_for(data).to_engine(),
            )
        except GradingError as e:
            return Response(grading_error_payload(e), status=status.HTTP_400_BAD_REQUEST)

        return Response(CompositeResultSerializer(result).data)

    @action(detail=False, methods=["post"], url_path="term-report")
    def term_report(self, request):
        req = TermReportRequestSerializer(data=request.data)
        req.is_valid(raise_exception=True)
        data = req.validated_data

        try:
            scale = _scale_for(data)
            weights = _weights_for(data)
        except GradingError as e:
            return Response(grading_error_payload(e), status=status.HTTP_400_BAD_REQUEST)

        grade = data.get("grade") or scale.grade
        learning_area = data.get("learning_area") or scale.learning_area
        if data.get("strategy"):
            # an explicit strategy applies to every formative mark
            strategy, n_value, type_rules = data["strategy"], data.get("n_value"), None
        else:
            rule = resolve_aggregation_config(grade, learning_area)
            strategy, n_value = rule.strategy, rule.n_value
            type_rules = resolve_type_rules(grade, learning_area)

        report = build_term_report(
            [_learner_marks(row) for row in data["learners"]],
            weights,
            scale.to_engine(),
            strategy=strategy,
            n_value=n_value,
            type_rules=type_rules,
        )

        return Response({
            "scale": scale.name,
            "strategy": MULTI_TYPE_WEIGHTED if type_rules else strategy,
            "lines": ReportLineSerializer(report.lines, many=True).data,
            "summary": report.summary(),
        })
