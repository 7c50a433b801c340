"""
Aggregate result model.

Two flavours of collection accumulate extracted records:

- KeyedCollection deduplicates by slug; a later page's record replaces an
  earlier one with the same slug (film grids, watchlists).
- OrderedCollection keeps every record in arrival order (ranked lists, diary,
  search ranking); records without a position get their 1-based index.

Derived views never copy or modify records; they return lists referencing the
stored objects.
"""
import dataclasses
from typing import Callable, Iterator


class _Views:
    def _iter_records(self) -> Iterator:
        raise NotImplementedError

    def select_where(self, predicate: Callable[[object], bool]) -> list:
        return [record for record in self._iter_records() if predicate(record)]

    def filter_by_year(self, year: int) -> list:
        return self.select_where(lambda record: record.year == year)

    def filter_by_rating_at_least(self, min_rating: float) -> list:
        return self.select_where(
            lambda record: record.rating is not None and record.rating >= min_rating
        )

    def watched(self) -> list:
        return self.select_where(lambda record: record.watched is True)

    def liked(self) -> list:
        return self.select_where(lambda record: record.liked is True)

    def in_watchlist(self) -> list:
        return self.select_where(lambda record: record.in_watchlist is True)

    @property
    def records(self) -> tuple:
        return tuple(self._iter_records())

    def __iter__(self):
        return self._iter_records()


class KeyedCollection(_Views):
    ordered = False

    def __init__(self, records=()):
        self._records: dict[str, object] = {}
        for record in records:
            self.insert_or_replace(record)

    def insert_or_replace(self, record) -> None:
        self._records[record.key] = record

    def merge(self, batch) -> None:
        for record in batch:
            self.insert_or_replace(record)

    def get(self, slug: str):
        return self._records.get(slug)

    def keys(self) -> list[str]:
        return list(self._records)

    def copy(self) -> "KeyedCollection":
        clone = KeyedCollection()
        clone._records = dict(self._records)
        return clone

    def _iter_records(self) -> Iterator:
        return iter(self._records.values())

    def __contains__(self, slug: str) -> bool:
        return slug in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"KeyedCollection({len(self)} records)"


class OrderedCollection(_Views):
    ordered = True

    def __init__(self, records=()):
        self._records: list = []
        for record in records:
            self.append(record)

    def append(self, record) -> None:
        if record.position is None:
            record = dataclasses.replace(record, position=len(self._records) + 1)
        self._records.append(record)

    def merge(self, batch) -> None:
        for record in batch:
            self.append(record)

    def get_by_position(self, position: int):
        for record in self._records:
            if record.position == position:
                return record
        return None

    def keys(self) -> list[str]:
        return [record.key for record in self._records]

    def copy(self) -> "OrderedCollection":
        clone = OrderedCollection()
        clone._records = list(self._records)
        return clone

    def _iter_records(self) -> Iterator:
        return iter(self._records)

    def __contains__(self, slug: str) -> bool:
        return any(record.slug == slug for record in self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int):
        return self._records[index]

    def __repr__(self) -> str:
        return f"OrderedCollection({len(self)} records)"


def new_collection(ordered: bool) -> KeyedCollection | OrderedCollection:
    return OrderedCollection() if ordered else KeyedCollection()
