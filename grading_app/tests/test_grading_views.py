import pytest
from django.urls import reverse

from grading_app.models import AggregationStrategy, AssessmentType, Term, TermWeights
from grading_app.tests.conftest import GAPPED_BANDS


def _mark(raw, maximum):
    return {"raw_score": raw, "max_score": maximum}


@pytest.mark.django_db
class TestCompositeEndpoint:
    def test_explicit_weights(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(reverse("grading-composite"), {
            "scale_id": str(scale.scale_id),
            "formative_average": 85,
            "summative_score": 90,
            "formative_weight": 60,
            "summative_weight": 40,
        }, format="json")
        assert res.status_code == 200, res.data
        assert res.data["weighted_score"] == 87
        assert res.data["level"]["level"] == "ME"

    def test_stored_term_weights(self, api_client, create_scale, create_weights):
        scale = create_scale()
        create_weights(academic_year=2025, term=Term.TERM_2, formative_weight=30, summative_weight=70)
        res = api_client.post(reverse("grading-composite"), {
            "scale_id": str(scale.scale_id),
            "formative_average": 45,
            "summative_score": 50,
            "academic_year": 2025,
            "term": "Term 2",
        }, format="json")
        assert res.status_code == 200, res.data
        # 45 * 0.3 + 50 * 0.7 = 48.5 -> 49
        assert res.data["weighted_score"] == 49
        assert res.data["level"]["level"] == "NY"

    def test_missing_term_weights(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(reverse("grading-composite"), {
            "scale_id": str(scale.scale_id),
            "formative_average": 80,
            "summative_score": 80,
            "academic_year": 2030,
            "term": "TERM_3",
        }, format="json")
        assert res.status_code == 400
        assert res.data["code"] == "CONFIGURATION_ERROR"

    def test_weights_not_summing_to_100(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(reverse("grading-composite"), {
            "scale_id": str(scale.scale_id),
            "formative_average": 80,
            "summative_score": 80,
            "formative_weight": 50,
            "summative_weight": 30,
        }, format="json")
        assert res.status_code == 400
        assert res.data["code"] == "CONFIGURATION_ERROR"

    def test_needs_a_weights_source(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(reverse("grading-composite"), {
            "scale_id": str(scale.scale_id),
            "formative_average": 80,
            "summative_score": 80,
        }, format="json")
        assert res.status_code == 400


@pytest.mark.django_db
class TestTermReportEndpoint:
    def _payload(self, scale, **extra):
        payload = {
            "scale_id": str(scale.scale_id),
            "formative_weight": 60,
            "summative_weight": 40,
            "learners": [
                {"learner_id": "L-001", "formative": [_mark(8, 10), _mark(9, 10)], "summative": _mark(45, 50)},
                {"learner_id": "L-002", "formative": [_mark(5, 10)], "summative": _mark(-1, 50)},
                {"learner_id": "L-003"},
            ],
        }
        payload.update(extra)
        return payload

    def test_report_lists_failures_without_failing(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(reverse("grading-term-report"), self._payload(scale), format="json")
        assert res.status_code == 200, res.data
        lines = {line["learner_id"]: line for line in res.data["lines"]}
        assert lines["L-001"]["status"] == "GRADED"
        assert lines["L-001"]["result"]["weighted_score"] == 87
        assert lines["L-002"]["status"] == "UNGRADED"
        assert lines["L-002"]["result"] is None
        assert lines["L-003"]["reason"] == "no marks"
        assert res.data["summary"]["graded"] == 1
        assert res.data["summary"]["ungraded"] == 2

    def test_strategy_defaults_to_configured_rule(self, api_client, create_scale, create_aggregation):
        scale = create_scale(grade="GRADE 4", learning_area="MATHEMATICS")
        create_aggregation(grade="GRADE 4", strategy=AggregationStrategy.BEST_N, n_value=1)
        res = api_client.post(reverse("grading-term-report"), self._payload(scale), format="json")
        assert res.data["strategy"] == "BEST_N"
        line = res.data["lines"][0]
        # best one of 80 and 90 -> 90; 0.6 * 90 + 0.4 * 90 = 90
        assert line["result"]["formative_average"] == 90
        assert line["result"]["level"]["level"] == "EE"

    def test_strategy_in_request_wins(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(
            reverse("grading-term-report"),
            self._payload(scale, strategy="Drop lowest N", n_value=1),
            format="json",
        )
        assert res.data["strategy"] == "DROP_LOWEST_N"
        assert res.data["lines"][0]["result"]["formative_average"] == 90

    def test_gapped_scale_only_fails_affected_learners(self, api_client, create_scale):
        scale = create_scale(bands=GAPPED_BANDS)
        res = api_client.post(reverse("grading-term-report"), {
            "scale_id": str(scale.scale_id),
            "formative_weight": 50,
            "summative_weight": 50,
            "learners": [
                {"learner_id": "A", "formative": [_mark(35, 100)], "summative": _mark(35, 100)},
                {"learner_id": "B", "formative": [_mark(80, 100)], "summative": _mark(80, 100)},
            ],
        }, format="json")
        assert [line["status"] for line in res.data["lines"]] == ["UNGRADED", "GRADED"]

    def test_missing_term_weights(self, api_client, create_scale):
        scale = create_scale()
        payload = self._payload(scale)
        del payload["formative_weight"], payload["summative_weight"]
        payload.update(academic_year=2030, term="TERM_1")
        res = api_client.post(reverse("grading-term-report"), payload, format="json")
        assert res.status_code == 400
        assert res.data["code"] == "CONFIGURATION_ERROR"


@pytest.mark.django_db
class TestTermWeightsViewSet:
    def test_create_accepts_term_label(self, api_client):
        res = api_client.post(reverse("term-weights-list"), {
            "academic_year": 2025, "term": "Term 1", "formative_weight": 60, "summative_weight": 40,
        }, format="json")
        assert res.status_code == 201, res.data
        assert res.data["term"] == "TERM_1"

    def test_weights_must_sum_to_100(self, api_client):
        res = api_client.post(reverse("term-weights-list"), {
            "academic_year": 2025, "term": "TERM_1", "formative_weight": 70, "summative_weight": 20,
        }, format="json")
        assert res.status_code == 400
        assert not TermWeights.objects.exists()

    def test_update_checks_sum_against_stored_value(self, api_client, create_weights):
        weights = create_weights()
        url = reverse("term-weights-detail", args=[weights.weights_id])
        res = api_client.patch(url, {"formative_weight": 70}, format="json")
        assert res.status_code == 400
        res = api_client.patch(url, {"formative_weight": 70, "summative_weight": 30}, format="json")
        assert res.status_code == 200
        weights.refresh_from_db()
        assert weights.as_weights().formative == 0.7

    def test_filter_by_year(self, api_client, create_weights):
        create_weights(academic_year=2024)
        create_weights(academic_year=2025)
        res = api_client.get(reverse("term-weights-list"), {"academic_year": 2025})
        assert [row["academic_year"] for row in res.data] == [2025]


@pytest.mark.django_db
class TestFormativeAggregationThroughApi:
    def test_weighted_average_uses_mark_weights(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(reverse("grading-term-report"), {
            "scale_id": str(scale.scale_id),
            "formative_weight": 60,
            "summative_weight": 40,
            "strategy": "WEIGHTED_AVERAGE",
            "learners": [{
                "learner_id": "L-001",
                "formative": [
                    {"raw_score": 80, "max_score": 100, "weight": 3},
                    {"raw_score": 40, "max_score": 100, "weight": 1},
                ],
            }],
        }, format="json")
        assert res.status_code == 200, res.data
        assert res.data["lines"][0]["result"]["formative_average"] == 70

    def test_negative_mark_weight_is_rejected(self, api_client, create_scale):
        scale = create_scale()
        res = api_client.post(reverse("grading-term-report"), {
            "scale_id": str(scale.scale_id),
            "formative_weight": 60,
            "summative_weight": 40,
            "learners": [{"learner_id": "L-001", "formative": [{"raw_score": 8, "max_score": 10, "weight": -1}]}],
        }, format="json")
        assert res.status_code == 400

    def test_configured_assessment_types(self, api_client, create_scale, create_aggregation):
        scale = create_scale(grade="GRADE 4", learning_area="MATHEMATICS")
        create_aggregation(assessment_type=AssessmentType.QUIZ, strategy=AggregationStrategy.BEST_N,
                           n_value=1, weight=1)
        create_aggregation(assessment_type=AssessmentType.CAT, weight=3)
        res = api_client.post(reverse("grading-term-report"), {
            "scale_id": str(scale.scale_id),
            "formative_weight": 60,
            "summative_weight": 40,
            "learners": [{
                "learner_id": "L-001",
                "formative": [
                    {"raw_score": 60, "max_score": 100, "assessment_type": "Quiz"},
                    {"raw_score": 90, "max_score": 100, "assessment_type": "QUIZ"},
                    {"raw_score": 70, "max_score": 100, "assessment_type": "CAT"},
                ],
                "summative": _mark(75, 100),
            }],
        }, format="json")
        assert res.status_code == 200, res.data
        assert res.data["strategy"] == "MULTI_TYPE_WEIGHTED"
        line = res.data["lines"][0]
        # QUIZ best 1 -> 90, CAT 70; (90 + 70 * 3) / 4 = 75
        assert line["result"]["formative_average"] == 75
        assert {t["assessment_type"]: t["average"] for t in line["breakdown"]} == {"QUIZ": 90, "CAT": 70}


@pytest.mark.django_db
class TestScaleLookupThroughApi:
    def test_composite_resolves_scale_from_grade(self, api_client, create_scale):
        create_scale(name="Whole school", bands=GAPPED_BANDS)
        create_scale(name="Grade 4 maths", grade="GRADE 4", learning_area="MATHEMATICS")
        res = api_client.post(reverse("grading-composite"), {
            "grade": "GRADE 4",
            "learning_area": "MATHEMATICS",
            "formative_average": 35,
            "summative_score": 35,
            "formative_weight": 60,
            "summative_weight": 40,
        }, format="json")
        assert res.status_code == 200, res.data
        assert res.data["level"]["level"] == "NY"

    def test_term_report_resolves_scale(self, api_client, create_scale):
        create_scale(name="Whole school")
        res = api_client.post(reverse("grading-term-report"), {
            "grade": "GRADE 6",
            "formative_weight": 60,
            "summative_weight": 40,
            "learners": [{"learner_id": "L-001", "summative": _mark(45, 50)}],
        }, format="json")
        assert res.status_code == 200, res.data
        assert res.data["scale"] == "Whole school"

    def test_no_scale_configured(self, api_client):
        res = api_client.post(reverse("grading-composite"), {
            "grade": "GRADE 4",
            "formative_average": 80,
            "summative_score": 80,
            "formative_weight": 60,
            "summative_weight": 40,
        }, format="json")
        assert res.status_code == 400
        assert res.data["code"] == "CONFIGURATION_ERROR"

    def test_needs_scale_or_context(self, api_client):
        res = api_client.post(reverse("grading-composite"), {
            "formative_average": 80,
            "summative_score": 80,
            "formative_weight": 60,
            "summative_weight": 40,
        }, format="json")
        assert res.status_code == 400
