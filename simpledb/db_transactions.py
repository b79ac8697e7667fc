import logging

from kv_store import KeyValueStore, PriorState

logger = logging.getLogger(__name__)

UndoFrame = dict[str, PriorState]


class TransactionStack:
    """
    Stack of undo frames, one per open BEGIN.

    Each frame records a key's state as it was when the block opened. Only
    the first mutation of a key inside a frame is recorded, so replaying a
    frame always lands on the state at its BEGIN.
    """

    def __init__(self):
        self.frames: list[UndoFrame] = []

    @property
    def depth(self) -> int:
        return len(self.frames)

    def push(self):
        self.frames.append({})

    def capture(self, key: str, state: PriorState):
        if not self.frames:
            return
        top = self.frames[-1]
        if key not in top:
            top[key] = state
            logger.debug(f"CAPTURE: {key} -> {state} at depth {self.depth}")

    def pop(self) -> UndoFrame:
        return self.frames.pop()

    def apply_top(self, store: KeyValueStore) -> int:
        frame = self.pop()
        for key, state in frame.items():
            store.restore(key, state)
        return len(frame)

    def clear(self):
        self.frames.clear()

    def __bool__(self):
        return bool(self.frames)

    def __len__(self):
        return len(self.frames)
