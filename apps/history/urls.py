from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'history'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.HistoryLogViewSet, basename='history-log')

urlpatterns = [
    # History ViewSet routes
    # GET    /api/history/                - List entries (?raffle=, ?include_undone=)
    # GET    /api/history/{id}/           - Get entry
    # POST   /api/history/{id}/undo/      - Undo entry

    # Include router URLs
    path('', include(router.urls)),
]
