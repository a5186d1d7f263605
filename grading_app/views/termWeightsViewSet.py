from rest_framework import mixins, viewsets
from django_filters.rest_framework import DjangoFilterBackend
from grading_app.models import TermWeights
from grading_app.filters import TermWeightsFilter
from grading_app.serializers.term_weights_serializer import TermWeightsSerializer

class TermWeightsViewSet(
    mixins.ListModelMixin, mixins.RetrieveModelMixin,
    mixins.CreateModelMixin, mixins.UpdateModelMixin,
    viewsets.GenericViewSet
    ):
    """
    • GET  /term-weights/         → list formative/summative weights per term
    • GET  /term-weights/{id}/    → retrieve one
    • POST /term-weights/         → configure a term (weights must sum to 100)
    • PUT  /term-weights/{id}/    → update weights for that term
    """

    queryset = TermWeights.objects.all()
    serializer_class = TermWeightsSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = TermWeightsFilter
