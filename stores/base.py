"""Shared plumbing for the client-side state containers.

Each store owns one state record, replaces it on every update and notifies
subscribers with the new snapshot. Persisted stores write their state to
LocalStorage under a fixed key, wrapped as {"state": ..., "version": N}.
"""

import logging
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from local_storage import LocalStorage
from services.exceptions import ValidationError

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=BaseModel)

Listener = Callable[[BaseModel], None]


class Store(Generic[StateT]):
    """Observable holder of a single pydantic state record."""

    def __init__(self, initial: StateT):
        self._state = initial
        self._listeners: list[Listener] = []

    @property
    def state(self) -> StateT:
        """Deep copy of the current state."""
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with a snapshot after each change.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, new_state: StateT) -> None:
        self._state = new_state
        for listener in list(self._listeners):
            listener(self.state)


class PersistedStore(Store[StateT]):
    """Store whose state is saved to LocalStorage on every change."""

    storage_key: str = ""
    version: int = 0

    def __init__(self, storage: LocalStorage, model: type[StateT]):
        self.storage = storage
        self._model = model
        super().__init__(self._rehydrate())

    def _rehydrate(self) -> StateT:
        """Load persisted state, falling back to defaults."""
        stored = self.storage.get_json(self.storage_key)
        if not isinstance(stored, dict):
            return self._model()

        try:
            return self._model.model_validate(stored.get("state", {}))
        except PydanticValidationError as e:
            logger.warning("Discarding invalid persisted state for %s: %s", self.storage_key, e)
            return self._model()

    def _set(self, new_state: StateT) -> None:
        self.storage.set_json(
            self.storage_key,
            {"state": new_state.model_dump(mode="json"), "version": self.version},
        )
        super()._set(new_state)

    def _merge(self, partial: dict) -> StateT:
        return merge_partial(self._state, partial)


def merge_partial(current: StateT, partial: dict) -> StateT:
    """Merge a partial update into a model and re-validate the result.

    Raises:
        ValidationError: On unknown fields or invalid values.
    """
    model = type(current)
    unknown = set(partial) - set(model.model_fields)
    if unknown:
        field = sorted(unknown)[0]
        raise ValidationError(f"Unknown field: {field}", field=field)

    merged = {**current.model_dump(), **partial}
    try:
        return model.model_validate(merged)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"Invalid value for {field}: {first.get('msg')}", field=field)
