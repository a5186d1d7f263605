# grading_app/urls/api.py
from rest_framework.routers import DefaultRouter
from grading_app.views.scaleViewSet import PerformanceScaleViewSet
from grading_app.views.termWeightsViewSet import TermWeightsViewSet
from grading_app.views.gradingViewSet import GradingViewSet

router = DefaultRouter()

#GET /api/performance-scales/ & GET /api/performance-scales/{scale_id}/
router.register("performance-scales", PerformanceScaleViewSet, basename="performance-scale")
#GET /api/term-weights/ & PUT /api/term-weights/{weights_id}/
router.register("term-weights", TermWeightsViewSet, basename="term-weights")
#POST /api/grading/composite/ & POST /api/grading/term-report/
router.register("grading", GradingViewSet, basename="grading")

urlpatterns = [
    # REST resources
    *router.urls
]
