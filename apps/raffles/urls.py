from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'raffles'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.RaffleViewSet, basename='raffle')

urlpatterns = [
    # Raffle ViewSet routes
    # GET    /api/raffles/                      - List raffles with sales and costs
    # POST   /api/raffles/                      - Create raffle
    # GET    /api/raffles/{id}/                 - Get raffle
    # PUT    /api/raffles/{id}/                 - Update raffle
    # DELETE /api/raffles/{id}/                 - Delete raffle
    # POST   /api/raffles/{id}/toggle_finalize/ - Finalize / reopen

    # Sales and costs
    path('<uuid:raffle_id>/entries/', views.raffle_entries, name='raffle-entries'),
    path(
        '<uuid:raffle_id>/entries/<uuid:entry_id>/',
        views.raffle_entry_detail,
        name='raffle-entry-detail'
    ),
    path(
        '<uuid:raffle_id>/costs/<uuid:cost_id>/reimburse/',
        views.cost_reimbursement,
        name='cost-reimbursement'
    ),

    # Include router URLs
    path('', include(router.urls)),
]
