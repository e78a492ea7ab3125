"""
GreenThumb Backend - Abstract Plant Classifier Interface
=========================================================

What:  Contract for the machine-learning service that identifies plants in
       an image and retrains itself on the photo catalogue.
How:   Concrete implementations inherit from PlantClassifier. The app
       factory installs one instance on `app.state.classifier`; routes
       receive it through the `get_classifier` dependency, so tests swap it
       with `app.dependency_overrides`.
Who:   Called by PlantService (predict) and the mlModel route (retrain).

Implementations:
    - RemoteClassifier: HTTP client for the model-serving process
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class Prediction:
    """
    Detections for one image, in the classifier's output order.

    boxes holds one (min_y, min_x, max_y, max_x) tuple per detection, each
    coordinate a fraction of the image height or width.
    """

    num_results: int
    classes: List[int] = field(default_factory=list)
    scores: List[float] = field(default_factory=list)
    boxes: List[Tuple[float, float, float, float]] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Prediction":
        """
        Parse the model server's `{numResults, classes, scores, boxes}` body.

        `boxes` may arrive flat (four numbers per detection) or nested.
        Raises ValueError when the arrays are shorter than numResults.
        """
        num_results = int(payload["numResults"])
        classes = [int(c) for c in payload.get("classes", [])]
        scores = [float(s) for s in payload.get("scores", [])]
        raw_boxes = list(payload.get("boxes", []))

        if raw_boxes and not isinstance(raw_boxes[0], (list, tuple)):
            flat = [float(v) for v in raw_boxes]
            boxes = [tuple(flat[i:i + 4]) for i in range(0, len(flat) - len(flat) % 4, 4)]
        else:
            boxes = [tuple(float(v) for v in box) for box in raw_boxes]

        if num_results < 0:
            raise ValueError("numResults may not be negative")
        if min(len(classes), len(scores), len(boxes)) < num_results:
            raise ValueError(
                f"Prediction declares {num_results} results but carries "
                f"{len(classes)} classes, {len(scores)} scores and {len(boxes)} boxes"
            )
        if any(len(box) != 4 for box in boxes[:num_results]):
            raise ValueError("Every bounding box needs exactly four coordinates")

        return cls(
            num_results=num_results,
            classes=classes[:num_results],
            scores=scores[:num_results],
            boxes=boxes[:num_results],
        )


class PlantClassifier(ABC):
    """
    Abstract interface for plant identification.

    Contract:
        - predict() returns a Prediction whose class ids are plant ids
        - implementation-specific failures are wrapped in MLServiceError
        - retrain() returns once the retrain has been requested
    """

    @abstractmethod
    async def predict(self, image: Dict[str, Any]) -> Prediction:
        """
        Identify the plants visible in an image.

        Args:
            image: `{data, height, width}` as sent by the client.

        Raises:
            MLServiceError: The service failed or answered with garbage.
            CircuitBreakerOpenError: Too many recent failures.
        """
        ...

    @abstractmethod
    async def retrain(self) -> None:
        """Ask the service to retrain on the current photo catalogue."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the service is reachable."""
        ...

    async def close(self) -> None:
        """Release transport resources; called on application shutdown."""
        return None
