from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from biblio.domain.entities import Row
from biblio.domain.ports import LibraryPort, RecordId, UseCaseError
from biblio.domain.resources import ResourceSpec
from biblio.usecases.error_mapping import map_api_error


@dataclass
class SaveRecord:
    """Create a record, or update ``editing_id`` when one is given."""

    port: LibraryPort
    resource: ResourceSpec

    def __call__(self, draft: Mapping[str, str], editing_id: Optional[RecordId] = None) -> Optional[Row]:
        try:
            payload = self.resource.payload_from_draft(draft)
        except ValueError as exc:
            raise UseCaseError("INVALID_FORM", str(exc)) from exc

        code = "CREATE_FAILED" if editing_id is None else "UPDATE_FAILED"
        try:
            if editing_id is None:
                envelope = self.port.create_record(self.resource.collection, payload)
            else:
                envelope = self.port.update_record(self.resource.collection, editing_id, payload)
        except Exception as exc:
            raise map_api_error(exc, default_code=code) from exc
        return envelope.item()
