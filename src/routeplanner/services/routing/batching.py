"""Split long waypoint lists into provider-sized requests."""

from __future__ import annotations

from typing import Sequence, TypeVar

from ...models.domain import Stop
from .models import Batch

T = TypeVar("T")


def batch_waypoints(intermediates: Sequence[T], max_size: int) -> list[list[T]]:
    """Chunk ``intermediates`` in their original order into lists of at most ``max_size``."""
    if max_size < 1:
        raise ValueError("Batch size must be at least 1.")
    return [list(intermediates[i : i + max_size]) for i in range(0, len(intermediates), max_size)]


def plan_batches(
    origin: Stop,
    destination: Stop,
    intermediates: Sequence[Stop],
    max_size: int,
) -> list[Batch]:
    """Chain chunks of intermediates into consecutive origin/destination requests.

    Every chunk except the last ends at its own final stop, which is also the
    origin of the following batch. The last chunk ends at ``destination``.
    """
    chunks = batch_waypoints(intermediates, max_size)
    if not chunks:
        return [Batch(number=1, origin=origin, destination=destination, waypoints=())]

    batches: list[Batch] = []
    current_origin = origin
    for index, chunk in enumerate(chunks):
        is_last = index == len(chunks) - 1
        if is_last:
            batch_destination = destination
            waypoints = tuple(chunk)
        else:
            batch_destination = chunk[-1]
            waypoints = tuple(chunk[:-1])
        batches.append(
            Batch(
                number=index + 1,
                origin=current_origin,
                destination=batch_destination,
                waypoints=waypoints,
            )
        )
        current_origin = batch_destination
    return batches
