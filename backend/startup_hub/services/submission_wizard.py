"""
Multi-step submission wizard.

Holds the values entered so far and the current step, validates one step at
a time, autosaves through a debounced draft store and produces the complete
SubmissionCreate once every step passes.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from ..schemas.submission import SUBMISSION_STEPS, SubmissionCreate
from ..schemas.validation import ValidationResult, validate
from ..utils.constants import DRAFT_KEY
from ..utils.draft_store import AutosaveDebouncer, DraftStore

logger = logging.getLogger(__name__)


class SubmissionWizard:
    def __init__(self, store: DraftStore, key: str = DRAFT_KEY,
                 debouncer: Optional[AutosaveDebouncer] = None,
                 steps: List[Type[BaseModel]] = None):
        self.store = store
        self.key = key
        self.debouncer = debouncer or AutosaveDebouncer(store, key)
        self.steps = steps or SUBMISSION_STEPS
        self.step = 0
        self.values: Dict[str, Any] = {}
        self.errors: Dict[str, List[str]] = {}

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def current_schema(self) -> Type[BaseModel]:
        return self.steps[self.step]

    @property
    def is_last_step(self) -> bool:
        return self.step == self.step_count - 1

    def _snapshot(self) -> Dict[str, Any]:
        return {"values": dict(self.values), "step": self.step}

    def update(self, **values) -> None:
        """Record field edits and schedule an autosave"""
        self.values.update(values)
        self.debouncer.schedule(self._snapshot())

    def validate_step(self, index: Optional[int] = None) -> ValidationResult:
        schema = self.steps[self.step if index is None else index]
        step_values = {name: self.values[name] for name in schema.model_fields if name in self.values}
        return validate(schema, step_values)

    def next(self) -> ValidationResult:
        """Advance only if the current step's fields are valid"""
        result = self.validate_step()
        self.errors = result.errors
        if result.ok and not self.is_last_step:
            self.step += 1
            self.debouncer.schedule(self._snapshot())
        return result

    def previous(self) -> None:
        if self.step > 0:
            self.step -= 1
            self.errors = {}
            self.debouncer.schedule(self._snapshot())

    def resume(self) -> bool:
        """Restore values and step from a saved draft. Returns False when there is none."""
        draft = self.store.load(self.key)
        if not draft:
            return False
        self.values = dict(draft.get("values") or {})
        step = draft.get("step", 0)
        self.step = step if isinstance(step, int) and 0 <= step < self.step_count else 0
        logger.info(f"Resumed submission draft at step {self.step + 1}/{self.step_count}")
        return True

    def complete(self) -> ValidationResult[SubmissionCreate]:
        """
        Validate the whole submission. On success the draft is discarded,
        on failure the wizard moves back to the first step with errors.
        """
        result = validate(SubmissionCreate, self.values)
        self.errors = result.errors
        if result.ok:
            self.clear_draft()
            return result

        for index in range(self.step_count):
            if not self.validate_step(index).ok:
                self.step = index
                break
        return result

    def clear_draft(self) -> None:
        self.debouncer.cancel()
        self.store.clear(self.key)
