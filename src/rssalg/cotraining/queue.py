"""
Selection of the most confident predictions.

Each co-training iteration keeps, for every class, the growth_size(class)
examples the view classifier is most confident about. TopKByConfidence is
the bounded, confidence-sorted container holding them.
"""

from typing import Dict, Hashable, Iterable, List, Mapping, Sequence

from ..ensemble.confidence import ConfidenceVector


class Prediction:
    """One classified example: id plus the confidences behind its label."""

    __slots__ = ('instance_id', 'confidences', 'label')

    def __init__(self, instance_id: Hashable, confidences: ConfidenceVector, class_names: Sequence[str]):
        self.instance_id = instance_id
        self.confidences = confidences
        self.label = confidences.prediction(class_names)

    @property
    def confidence(self) -> float:
        return self.confidences.combined_confidence()

    def __repr__(self) -> str:
        return (
            f"Prediction(id={self.instance_id!r}, label={self.label!r}, "
            f"confidence={self.confidence:.4f})"
        )


class TopKByConfidence:
    """
    At most `capacity` predictions, sorted by descending confidence.

    A new prediction is inserted before the first member that is strictly
    less confident, so equally confident predictions keep their arrival
    order. Once full, a prediction enters only if it is strictly more
    confident than the last member, which is then evicted.

    Parameters:
        capacity: Maximum number of predictions kept (0 keeps nothing)

    Example:
        >>> queue = TopKByConfidence(2)
        >>> for p in predictions:
        ...     queue.add(p)
        >>> [p.confidence for p in queue]
        [0.97, 0.91]
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        self.capacity = capacity
        self._items: List[Prediction] = []

    def add(self, prediction: Prediction):
        if self.capacity == 0:
            return
        confidence = prediction.confidence
        if len(self._items) == self.capacity:
            if confidence <= self._items[-1].confidence:
                return
            self._items.pop()

        for position, item in enumerate(self._items):
            if item.confidence < confidence:
                self._items.insert(position, prediction)
                return
        self._items.append(prediction)

    def items(self) -> List[Prediction]:
        return list(self._items)

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"TopKByConfidence(capacity={self.capacity}, size={len(self)})"


class MostConfidentPredictions:
    """
    One TopKByConfidence per class; a prediction goes to the queue of its
    predicted label.

    Parameters:
        class_names: Canonical class ordering
        growth_size: Capacity of each class queue
    """

    def __init__(self, class_names: Sequence[str], growth_size: Mapping[str, int]):
        self.class_names = list(class_names)
        self._queues: Dict[str, TopKByConfidence] = {
            name: TopKByConfidence(growth_size[name]) for name in self.class_names
        }

    def add(self, prediction: Prediction):
        self._queues[prediction.label].add(prediction)

    def add_all(self, predictions: Iterable[Prediction]):
        for prediction in predictions:
            self.add(prediction)

    def for_class(self, class_name: str) -> List[Prediction]:
        return self._queues[class_name].items()

    def selected(self) -> List[Prediction]:
        """All kept predictions, class by class in canonical order."""
        return [p for name in self.class_names for p in self._queues[name]]

    def __len__(self) -> int:
        return sum(len(queue) for queue in self._queues.values())

    def __repr__(self) -> str:
        sizes = ", ".join(f"{name}={len(self._queues[name])}" for name in self.class_names)
        return f"MostConfidentPredictions({sizes})"
