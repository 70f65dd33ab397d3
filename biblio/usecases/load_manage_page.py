from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from biblio.domain.entities import Row
from biblio.domain.ports import LibraryPort
from biblio.domain.resources import ResourceSpec
from biblio.usecases.error_mapping import map_api_error


@dataclass(frozen=True)
class ManagePageData:
    """Records of one managed resource plus the option lists its form needs."""

    records: Tuple[Row, ...] = ()
    lookups: Dict[str, Tuple[Row, ...]] = field(default_factory=dict)


@dataclass
class LoadManagePage:
    port: LibraryPort
    resource: ResourceSpec

    def __call__(self) -> ManagePageData:
        """Fetch the resource list and every non-static lookup list.

        Any failing request fails the whole page; there is no partial data.
        """
        try:
            envelope = self.port.list_records(
                self.resource.collection, limit=self.resource.list_limit
            )
            lookups: Dict[str, Tuple[Row, ...]] = {
                lookup.key: tuple(dict(row) for row in lookup.static_rows or ())
                for lookup in self.resource.lookups
                if lookup.is_static
            }
            for lookup in self.resource.fetched_lookups():
                lookups[lookup.key] = tuple(self.port.list_records(lookup.collection).rows())
        except Exception as exc:
            raise map_api_error(exc, default_code="LOAD_FAILED") from exc
        return ManagePageData(records=tuple(envelope.rows()), lookups=lookups)
