from __future__ import annotations

import logging
from collections.abc import MutableSequence
from typing import TYPE_CHECKING, Generic, Iterable, Iterator, List, TypeVar, overload

from .exceptions import ContainmentError

if TYPE_CHECKING:
    from .elements import EObject

LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound="EObject")


def remove_from_container(obj: EObject) -> None:
    """Detach ``obj`` from the containment list it currently lives in.

    Every containable kind names, through ``containing_feature``, the list
    attribute of its container that holds it. Objects without a container
    are left untouched.
    """
    if obj is None:
        raise ValueError("obj must not be None")
    container = obj.container
    if container is None:
        return
    feature = getattr(type(obj), "containing_feature", None)
    if feature is None:
        raise ContainmentError(f"The subclass is not supported {type(obj).__name__}")
    owning_list = getattr(container, feature, None)
    if not isinstance(owning_list, ContainmentList):
        raise ContainmentError(
            f"{type(container).__name__} has no containment list {feature!r} for {obj!r}"
        )
    owning_list.remove(obj)


class ContainmentList(MutableSequence, Generic[T]):
    """Ordered, duplicate-free list of objects owned by ``owner``.

    Adding an object moves it: it is removed from its previous container's
    list and its ``container`` is pointed at ``owner``.
    """

    def __init__(self, owner: EObject, items: Iterable[T] = ()) -> None:
        self._owner = owner
        self._items: List[T] = []
        self.add_range(items)

    @property
    def owner(self) -> EObject:
        return self._owner

    def _check_index(self, index: int) -> int:
        if not isinstance(index, int):
            raise TypeError(f"index must be an int, not {type(index).__name__}")
        if index < 0 or index >= len(self._items):
            raise IndexError(
                f"index is {index}, valid range is 0 to {len(self._items) - 1}."
            )
        return index

    def _contains(self, obj: object) -> bool:
        return any(item is obj for item in self._items)

    def _attach(self, obj: T) -> None:
        remove_from_container(obj)
        obj.container = self._owner

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> List[T]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self._items[index]
        return self._items[self._check_index(index)]

    def __setitem__(self, index, value) -> None:
        index = self._check_index(index)
        if value is None:
            raise ValueError("value must not be None")
        current = self._items[index]
        if current is value:
            return
        if self._contains(value):
            raise ContainmentError(f"The added item already exists {value!r}.")
        self._attach(value)
        current.container = None
        self._items[index] = value

    def __delitem__(self, index) -> None:
        index = self._check_index(index)
        obj = self._items.pop(index)
        obj.container = None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __contains__(self, obj: object) -> bool:
        return self._contains(obj)

    def __repr__(self) -> str:
        return f"ContainmentList({self._items!r})"

    def index(self, value, start: int = 0, stop: int | None = None) -> int:
        stop = len(self._items) if stop is None else stop
        for position in range(start, min(stop, len(self._items))):
            if self._items[position] is value:
                return position
        raise ValueError(f"{value!r} is not in list")

    def insert(self, index: int, value: T) -> None:
        if value is None:
            raise ValueError("value must not be None")
        if self._contains(value):
            raise ContainmentError(f"The added item already exists {value!r}.")
        self._attach(value)
        self._items.insert(index, value)

    def pop(self, index: int = -1) -> T:
        if index < 0:
            index += len(self._items)
        obj = self[index]
        del self[index]
        return obj

    def clear(self) -> None:
        for obj in self._items:
            obj.container = None
        self._items.clear()

    def add(self, value: T) -> None:
        self.insert(len(self._items), value)

    def add_range(self, values: Iterable[T]) -> None:
        for value in values:
            self.add(value)

    append = add
    extend = add_range
