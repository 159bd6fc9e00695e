"""
Prometheus metrics endpoint.

Exposes application metrics in Prometheus format for scraping.

Metrics exposed:
- practice_invitations_issued_total: Invitations minted, by party type
- practice_invitations_accepted_total: Invitations accepted, by party type
- practice_invitations_purged_total: Expired invitations deleted by the sweep
- practice_identifier_conflicts_total: TFN writes rejected by the uniqueness guard
- practice_decryption_failures_total: Stored ciphertext that could not be read
- practice_pending_parties: Current PENDING party rows, by party type
"""
import logging

from django.http import HttpResponse
from django.views import View
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

logger = logging.getLogger(__name__)


invitations_issued = Counter(
    "practice_invitations_issued_total",
    "Party invitations issued",
    ["party_type"],
)

invitations_accepted = Counter(
    "practice_invitations_accepted_total",
    "Party invitations accepted",
    ["party_type"],
)

invitations_purged = Counter(
    "practice_invitations_purged_total",
    "Expired, unaccepted invitations deleted",
    ["party_type"],
)

identifier_conflicts = Counter(
    "practice_identifier_conflicts_total",
    "Tax identifier writes rejected as already in use",
)

decryption_failures = Counter(
    "practice_decryption_failures_total",
    "Stored sensitive values that failed to decrypt",
)

pending_parties = Gauge(
    "practice_pending_parties",
    "Party rows awaiting a response",
    ["party_type"],
)


def collect_metrics():
    """Refresh gauge values from the database."""
    from parties.models import PartyStatus
    from parties.types import all_party_types

    try:
        for descriptor in all_party_types():
            count = descriptor.party_model.objects.filter(status=PartyStatus.PENDING).count()
            pending_parties.labels(party_type=descriptor.key).set(count)
    except Exception as e:
        logger.error(f"Error collecting metrics: {e}")


def get_prometheus_response():
    """Generate Prometheus metrics response."""
    collect_metrics()
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)


class MetricsView(View):
    """
    Prometheus metrics endpoint.

    Exposes metrics in Prometheus format at /_metrics.
    Should be protected in production (internal network only).
    """

    def get(self, request):
        return get_prometheus_response()
