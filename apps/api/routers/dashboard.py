"""Dashboard KPIs and AI commentary."""

from fastapi import APIRouter, Depends

from apps.api.deps import get_insights_client, get_store
from core.utils_datetime import get_current_datetime
from domain.models import DashboardMetrics, InsightResponse
from integrations.openai.insights_client import InsightsClient
from services.dashboard_metrics import compute_metrics
from services.front_of_house_store import FrontOfHouseStore


router = APIRouter(prefix="/restaurants/{restaurant_id}/dashboard", tags=["dashboard"])


def _metrics(store: FrontOfHouseStore) -> DashboardMetrics:
    tz_name = store.get_settings().manager_settings.timezone
    return compute_metrics(
        store.list_reservations(),
        store.list_waitlist(active_only=False),
        get_current_datetime(tz_name),
    )


@router.get("/metrics", response_model=DashboardMetrics)
def get_metrics(store: FrontOfHouseStore = Depends(get_store)):
    return _metrics(store)


@router.get("/insights", response_model=InsightResponse)
def get_insights(
    store: FrontOfHouseStore = Depends(get_store),
    client: InsightsClient = Depends(get_insights_client),
):
    """One insight and one suggestion; falls back to a fixed pair on any failure."""
    return client.generate_insights(_metrics(store).to_insight_request())
