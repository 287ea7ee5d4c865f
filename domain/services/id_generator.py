from __future__ import annotations

# Fixed epoch for the "updated" field; elements are stamped epoch + n ms.
TIMESTAMP_EPOCH_MS = 1_700_000_000_000


class IdGenerator:
    """Deterministic source of element ids, z-order indices, seeds and timestamps.

    Every value comes from a per-instance counter, so two generators fed the same
    call sequence produce identical output. Create one per diagram build or call
    ``reset`` between builds.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._id_counter = 0
        self._index_counter = 0
        self._seed_counter = 0
        self._clock = 0

    def generate_id(self) -> str:
        element_id = f"element-{self._id_counter}"
        self._id_counter += 1
        return element_id

    def generate_index(self) -> str:
        index = f"c0g{self._index_counter:06X}"
        self._index_counter += 1
        return index

    def generate_seed(self) -> int:
        self._seed_counter += 1
        return self._seed_counter

    def timestamp(self) -> int:
        self._clock += 1
        return TIMESTAMP_EPOCH_MS + self._clock
