import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from db_exceptions import IndexCorruptionError
from frequency_index import FrequencyIndex

logger = logging.getLogger(__name__)


# ======================
# Key States
# ======================

@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class Present:
    value: str


ABSENT = Absent()

PriorState = Union[Absent, Present]


# ======================
# Store
# ======================

class KeyValueStore:
    """
    Key -> value mapping that keeps a FrequencyIndex in step with every write.

    The raw_* methods do no transaction bookkeeping; they are used both for
    user edits (after the engine has captured undo state) and for rollback.
    """

    def __init__(self):
        self.store: dict[str, str] = {}
        self.index = FrequencyIndex()

    def raw_set(self, key: str, value: str):
        old_value = self.store.get(key)
        if key in self.store:
            self.index.decrement(old_value)
        self.store[key] = value
        self.index.increment(value)
        logger.debug(f"RAW SET: {key} = {value} (old: {old_value})")

    def raw_unset(self, key: str):
        if key not in self.store:
            return
        value = self.store.pop(key)
        self.index.decrement(value)
        logger.debug(f"RAW UNSET: {key} (was: {value})")

    def raw_get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    def lookup(self, key: str) -> PriorState:
        if key in self.store:
            return Present(self.store[key])
        return ABSENT

    def restore(self, key: str, state: PriorState):
        if isinstance(state, Present):
            self.raw_set(key, state.value)
        else:
            self.raw_unset(key)

    def count_of(self, value: str) -> int:
        return self.index.count_of(value)

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self.store.items())

    def check_invariant(self):
        expected = {}
        for value in self.store.values():
            expected[value] = expected.get(value, 0) + 1
        actual = self.index.as_dict()
        if expected != actual:
            raise IndexCorruptionError(
                f"Frequency index out of sync: expected {expected}, got {actual}"
            )

    def __contains__(self, key: str) -> bool:
        return key in self.store

    def __len__(self):
        return len(self.store)
