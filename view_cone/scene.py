"""
Obstacle set owned by scene-editing code.

Editing code adds, removes, replaces and moves shapes here; every mutation
bumps ``revision`` and notifies subscribers, which is how observers learn
that their cached boundaries are out of date.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, Optional, Tuple

from view_cone.geometry import Point
from view_cone.shapes import Shape, ensure_shape

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ObstacleSet:
    """
    Ordered collection of obstacle shapes with change notification.

    Order only matters to editing code (later shapes are drawn and picked
    on top of earlier ones); the visibility sweep treats the set as
    unordered.

    Example:
        >>> from view_cone import Box, Observer, ObstacleSet
        >>> obstacles = ObstacleSet([Box(50, -5, 10, 10)])
        >>> observer = Observer((0, 0))
        >>> unsubscribe = obstacles.subscribe(observer.invalidate)
        >>> _ = observer.visibility_boundary(obstacles)
        >>> _ = obstacles.move(0, 5, 0)
        >>> observer.is_stale
        True
    """

    def __init__(self, shapes: Iterable[Any] = ()) -> None:
        self._shapes: list[Shape] = [ensure_shape(s) for s in shapes]
        self._listeners: list[Listener] = []
        self._revision = 0

    def __repr__(self) -> str:
        return f"ObstacleSet({self._shapes!r})"

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._shapes)

    def __len__(self) -> int:
        return len(self._shapes)

    def __getitem__(self, index: int) -> Shape:
        return self._shapes[index]

    def __contains__(self, shape: object) -> bool:
        return shape in self._shapes

    @property
    def revision(self) -> int:
        """Number of mutations since construction."""
        return self._revision

    @property
    def shapes(self) -> Tuple[Shape, ...]:
        return tuple(self._shapes)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener after every mutation.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self, action: str) -> None:
        self._revision += 1
        logger.debug("Obstacle set %s (revision %d, %d shapes)", action, self._revision, len(self._shapes))
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, shape: Any) -> int:
        """Append shape on top and return its index."""
        self._shapes.append(ensure_shape(shape))
        self._changed("add")
        return len(self._shapes) - 1

    def insert(self, index: int, shape: Any) -> None:
        self._shapes.insert(index, ensure_shape(shape))
        self._changed("insert")

    def remove(self, shape: Shape) -> None:
        """
        Remove the first occurrence of shape.

        Raises:
            ValueError: If shape is not in the set
        """
        self._shapes.remove(shape)
        self._changed("remove")

    def pop(self, index: int = -1) -> Shape:
        """
        Remove and return the shape at index.

        Raises:
            IndexError: If index is out of range
        """
        shape = self._shapes.pop(index)
        self._changed("pop")
        return shape

    def replace(self, index: int, shape: Any) -> Shape:
        """
        Swap the shape at index for a new one and return the old shape.

        Raises:
            IndexError: If index is out of range
        """
        new_shape = ensure_shape(shape)
        old_shape = self._shapes[index]
        self._shapes[index] = new_shape
        self._changed("replace")
        return old_shape

    def move(self, index: int, dx: float, dy: float) -> Shape:
        """Translate the shape at index by (dx, dy) and return the moved shape."""
        moved = self._shapes[index].translated(dx, dy)
        self.replace(index, moved)
        return moved

    def clear(self) -> None:
        self._shapes.clear()
        self._changed("clear")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def shape_at(self, point: Any) -> Optional[Tuple[int, Shape]]:
        """
        Topmost shape containing point.

        Searches from the most recently added shape down, so the shape a
        user sees on top is the one picked.

        Returns:
            (index, shape), or None if no shape contains the point
        """
        p = Point.of(point)
        for index in range(len(self._shapes) - 1, -1, -1):
            shape = self._shapes[index]
            if shape.contains(p):
                return index, shape
        return None
