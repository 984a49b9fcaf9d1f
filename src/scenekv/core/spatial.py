from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .transforms import Vec3Like


@dataclass(frozen=True, eq=False)
class SpatialForce:
    """Force/moment pair. The moment is taken about the origin of the frame
    the wrench is expressed in."""

    force: np.ndarray = field(default_factory=lambda: np.zeros(3))
    moment: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        object.__setattr__(self, "force", np.asarray(self.force, dtype=np.float64).reshape(3))
        object.__setattr__(self, "moment", np.asarray(self.moment, dtype=np.float64).reshape(3))

    def translated(self, point: Vec3Like) -> "SpatialForce":
        """Re-express a wrench applied at `point` about the frame origin.

        A pure force acting through `point` picks up the moment `point x force`.
        """
        p = np.asarray(point, dtype=np.float64).reshape(3)
        return SpatialForce(self.force.copy(), self.moment + np.cross(p, self.force))

    def as_vector(self) -> np.ndarray:
        return np.concatenate([self.force, self.moment])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpatialForce):
            return NotImplemented
        return np.array_equal(self.force, other.force) and np.array_equal(self.moment, other.moment)

    __hash__ = None  # type: ignore[assignment]
