from collections import defaultdict


class FrequencyIndex:
    """Reverse index: value -> number of keys currently holding it."""

    def __init__(self):
        self.value_count = defaultdict(int)

    def increment(self, value: str):
        self.value_count[value] += 1

    def decrement(self, value: str):
        self.value_count[value] -= 1
        if self.value_count[value] <= 0:
            del self.value_count[value]

    def count_of(self, value: str) -> int:
        return self.value_count.get(value, 0)

    def total(self) -> int:
        return sum(self.value_count.values())

    def as_dict(self) -> dict[str, int]:
        return dict(self.value_count)

    def __len__(self):
        return len(self.value_count)
