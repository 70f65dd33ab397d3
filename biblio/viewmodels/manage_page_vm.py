"""Create/edit/delete page state for one managed resource.

Call context:
    ``biblio.web_ui.main`` builds one ``ManagePageVM`` per management page
    (books, authors, genres, users) and renders ``state``, ``draft`` and
    ``submitting``. Every mutation is routed through the injected
    ``ActionGate``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from biblio.domain.entities import Row
from biblio.domain.ports import RecordId, UseCaseError
from biblio.domain.resources import ResourceSpec
from biblio.usecases.delete_record import DeleteRecord
from biblio.usecases.load_manage_page import LoadManagePage, ManagePageData
from biblio.usecases.save_record import SaveRecord
from .action_gate_vm import ActionGate
from .fetch_vm import FetchVM, IoRunner

LOGGER = logging.getLogger(__name__)


@dataclass
class FormDraft:
    """Unsaved form values; ``editing_id`` set means update mode."""

    fields: Dict[str, str] = field(default_factory=dict)
    editing_id: Optional[RecordId] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None


class ManagePageVM(FetchVM[ManagePageData]):
    def __init__(
        self,
        resource: ResourceSpec,
        *,
        load: LoadManagePage,
        save: SaveRecord,
        delete: DeleteRecord,
        gate: ActionGate,
        runner: Optional[IoRunner] = None,
        on_change: Optional[Callable[[], None]] = None,
        on_edit: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(load, runner=runner, on_change=on_change)
        self.resource = resource
        self.error_message = resource.load_error_message()
        self._save = save
        self._delete = delete
        self.gate = gate
        self.on_edit = on_edit
        self.draft = FormDraft(resource.empty_draft())
        self.submitting = False

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------
    @property
    def records(self) -> Tuple[Row, ...]:
        data = self.data
        return data.records if data is not None else ()

    @property
    def lookups(self) -> Mapping[str, Tuple[Row, ...]]:
        data = self.data
        return data.lookups if data is not None else {}

    def options(self, lookup_key: str) -> Dict[int, str]:
        spec = self.resource.lookup(lookup_key)
        return spec.options(self.lookups.get(lookup_key, ()))

    def details(self, row: Mapping[str, Any]) -> List[Tuple[str, str]]:
        return [
            (label, str(row.get(name) or ""))
            for name, label in self.resource.detail_fields
            if row.get(name) not in (None, "")
        ]

    # ------------------------------------------------------------------
    # Form draft
    # ------------------------------------------------------------------
    def set_field(self, name: str, value: Any) -> None:
        self.draft.fields[name] = "" if value is None else str(value)

    def start_edit(self, row: Mapping[str, Any]) -> None:
        self.draft = FormDraft(
            fields=self.resource.draft_from_record(row, self.lookups),
            editing_id=self.resource.record_id(row),
        )
        self._changed()
        if self.on_edit:
            self.on_edit()

    def cancel_edit(self) -> None:
        self.draft = FormDraft(self.resource.empty_draft())
        self._changed()

    # ------------------------------------------------------------------
    # Guarded mutations
    # ------------------------------------------------------------------
    def request_submit(self) -> bool:
        """Ask for confirmation of a create or update; False if not possible."""
        if self.submitting:
            return False
        missing = self.resource.missing_fields(self.draft.fields)
        if missing:
            self.gate.notify(f"Please fill in: {', '.join(missing)}", "error")
            return False

        fields = dict(self.draft.fields)
        editing_id = self.draft.editing_id
        label = fields.get(self.resource.label_field, "")
        if editing_id is None:
            title, message = self.resource.create_prompt(label)
        else:
            title, message = self.resource.update_prompt(label)
        self.gate.request_confirmation(
            title,
            message,
            lambda: self._submit(fields, editing_id, label),
            "info",
        )
        return True

    def request_delete(self, row: Mapping[str, Any]) -> None:
        record_id = self.resource.record_id(row)
        label = self.resource.record_label(row)
        title, message = self.resource.delete_prompt(label)
        self.gate.request_confirmation(
            title,
            message,
            lambda: self._remove(record_id, label),
            "danger",
        )

    async def _submit(self, fields: Dict[str, str], editing_id: Optional[RecordId], label: str) -> None:
        creating = editing_id is None
        self.submitting = True
        self._changed()
        try:
            await self._runner(self._save, fields, editing_id)
        except UseCaseError as exc:
            LOGGER.error("Saving %s %r failed: [%s] %s", self.resource.noun, label, exc.code, exc.message)
            self.gate.notify(self.resource.failure_message("creating" if creating else "updating"), "error")
            return
        finally:
            self.submitting = False
            self._changed()

        self.gate.notify(self.resource.success_message("created" if creating else "updated", label))
        self.draft = FormDraft(self.resource.empty_draft())
        await self.refresh()

    async def _remove(self, record_id: RecordId, label: str) -> None:
        try:
            await self._runner(self._delete, record_id)
        except UseCaseError as exc:
            LOGGER.error("Deleting %s #%s failed: [%s] %s", self.resource.noun, record_id, exc.code, exc.message)
            self.gate.notify(self.resource.failure_message("deleting"), "error")
            return
        self.gate.notify(self.resource.success_message("deleted", label))
        await self.refresh()


__all__ = ["FormDraft", "ManagePageVM"]
