import logging
from typing import Optional

from db_transactions import TransactionStack
from kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class Engine:
    """
    Transactional key-value engine.

    Owns the store, its frequency index and the undo stack. ROLLBACK undoes
    the innermost open block; COMMIT closes every open block at once and
    keeps the current data.
    """

    def __init__(self):
        self.store = KeyValueStore()
        self.transactions = TransactionStack()
        logger.debug("Initialized Engine")

    @property
    def depth(self) -> int:
        return self.transactions.depth

    @property
    def in_transaction(self) -> bool:
        return bool(self.transactions)

    def set(self, key: str, value: str):
        self.transactions.capture(key, self.store.lookup(key))
        self.store.raw_set(key, value)
        logger.debug(f"SET: {key} = {value} (depth: {self.depth})")

    def get(self, key: str) -> Optional[str]:
        value = self.store.raw_get(key)
        logger.debug(f"GET: {key} => {value if value is not None else 'NULL'}")
        return value

    def unset(self, key: str):
        # unsetting an absent key must not leave an entry in the undo frame
        if key not in self.store:
            logger.debug(f"UNSET: {key} already absent")
            return
        self.transactions.capture(key, self.store.lookup(key))
        self.store.raw_unset(key)
        logger.debug(f"UNSET: {key} (depth: {self.depth})")

    def count_equal_to(self, value: str) -> int:
        count = self.store.count_of(value)
        logger.debug(f"NUMEQUALTO: {value} => {count}")
        return count

    def begin(self):
        self.transactions.push()
        logger.debug(f"BEGIN: depth {self.depth}")

    def rollback(self) -> bool:
        if not self.transactions:
            logger.warning("ROLLBACK: no transaction in progress")
            return False
        restored = self.transactions.apply_top(self.store)
        logger.debug(f"ROLLBACK: restored {restored} keys. Depth left: {self.depth}")
        return True

    def commit(self) -> bool:
        if not self.transactions:
            logger.warning("COMMIT: no transaction in progress")
            return False
        closed = self.depth
        self.transactions.clear()
        logger.debug(f"COMMIT: closed {closed} blocks")
        return True
