from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generic, Iterator, TypeVar

import pydantic
from pydantic import TypeAdapter

from .errors import SchemaError
from .interfaces import DocumentStore

T = TypeVar("T")


class TypedDocument(Generic[T]):
    """
    A stored document validated against the shape its call site expects.

    `shape` is anything pydantic can validate, typically `list[SomeModel]` or
    `dict[str, SomeModel]`:

        orders = TypedDocument(manager, "orders.json", list[Order])
        with orders.update() as items:
            items.append(Order(...))
    """

    def __init__(self, store: DocumentStore, name: str, shape: Any):
        self._store = store
        self._name = name
        self._adapter: TypeAdapter[T] = TypeAdapter(shape)

    @property
    def name(self) -> str:
        return self._name

    def load(self) -> T:
        raw = self._store.read_json(self._name)
        try:
            return self._adapter.validate_python(raw)
        except pydantic.ValidationError as e:
            raise SchemaError(f"{self._name} does not match the expected shape: {e}", name=self._name) from e

    def save(self, value: T) -> None:
        self._store.write_json(self._name, self._adapter.dump_python(value, mode="json"))

    @contextmanager
    def update(self) -> Iterator[T]:
        """Load under the document lock, yield for in-place edits, save on clean exit."""
        with self._store.locked(self._name):
            value = self.load()
            yield value
            self.save(value)
