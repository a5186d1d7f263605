from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from grading_app.exceptions import ConfigurationError, GradingError
from grading_app.filters import PerformanceScaleFilter
from grading_app.models import PerformanceScale
from grading_app.serializers.grading_serializer import BandSerializer, ClassifyRequestSerializer
from grading_app.serializers.scale_serializer import PerformanceScaleSerializer
from grading_app.services import scale_math
from grading_app.utils import grading_error_payload


class PerformanceScaleViewSet(viewsets.ModelViewSet):
    """
    • GET    /performance-scales/                  → list scales (filter by grade, learning_area, scale_type, active)
    • POST   /performance-scales/                  → create a scale with its bands
    • PUT    /performance-scales/{id}/             → replace a scale and its bands
    • POST   /performance-scales/{id}/classify/    → band for a percentage or raw mark
    • GET    /performance-scales/{id}/coverage/    → gaps / overlaps in the band set
    """
    queryset = PerformanceScale.objects.prefetch_related("bands")
    serializer_class = PerformanceScaleSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = PerformanceScaleFilter
    search_fields = ["name", "grade", "learning_area"]
    ordering_fields = ["name", "grade", "created_at"]

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response({
            "message": "Performance scale deleted successfully."
        }, status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="classify")
    def classify(self, request, pk=None):
        scale = self.get_object().to_engine()
        req = ClassifyRequestSerializer(data=request.data)
        req.is_valid(raise_exception=True)
        data = req.validated_data

        try:
            if "percentage" in data:
                percentage = data["percentage"]
            else:
                percentage = scale_math.percentage_of(
                    scale_math.ScoreEntry(raw_score=data["raw_score"], max_score=data["max_score"])
                )
            band = scale_math.classify(percentage, scale)
        except GradingError as e:
            return Response(grading_error_payload(e), status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "scale": scale.name,
            "percentage": percentage,
            "band": BandSerializer(band).data,
        })

    @action(detail=True, methods=["get"], url_path="coverage")
    def coverage(self, request, pk=None):
        try:
            scale_math.validate_scale(self.get_object().to_engine())
        except ConfigurationError as e:
            return Response({"valid": False, "problems": e.problems or [str(e)]})
        return Response({"valid": True, "problems": []})
