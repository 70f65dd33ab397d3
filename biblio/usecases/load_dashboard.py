from __future__ import annotations

from dataclasses import dataclass
import logging

from biblio.domain.entities import DashboardStats
from biblio.domain.ports import LibraryPort
from biblio.usecases.error_mapping import map_api_error

LOGGER = logging.getLogger(__name__)


@dataclass
class LoadDashboard:
    """Combine the dashboard aggregate with collection counts.

    The due-soon count is best effort: when that endpoint fails the dashboard
    still loads and reports zero.
    """

    port: LibraryPort

    def __call__(self) -> DashboardStats:
        try:
            due_soon = self.port.fetch("/notificaciones/proximos-vencer").total()
        except Exception:
            LOGGER.warning("Due-soon count unavailable; showing 0.", exc_info=True)
            due_soon = 0

        try:
            summary = self.port.fetch("/estadisticas/dashboard").item() or {}
            return DashboardStats.from_payload(
                summary,
                total_authors=self.port.list_records("/autores").total(),
                total_genres=self.port.list_records("/generos").total(),
                due_soon=due_soon,
            )
        except Exception as exc:
            raise map_api_error(exc, default_code="LOAD_FAILED") from exc
