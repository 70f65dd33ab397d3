from __future__ import annotations

from dataclasses import dataclass

from biblio.domain.ports import LibraryPort, RecordId
from biblio.domain.resources import ResourceSpec
from biblio.usecases.error_mapping import map_api_error


@dataclass
class DeleteRecord:
    port: LibraryPort
    resource: ResourceSpec

    def __call__(self, record_id: RecordId) -> None:
        try:
            self.port.delete_record(self.resource.collection, record_id)
        except Exception as exc:
            raise map_api_error(exc, default_code="DELETE_FAILED") from exc
