from __future__ import annotations
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidArgument


class Layout(str, Enum):
    RANDOM = "random"   # uniform in [0, square_size]^2
    CIRCLE = "circle"   # evenly spaced on the inscribed circle


@dataclass(frozen=True)
class City:
    idx: int
    x: float
    y: float


@dataclass
class TSPInstance:
    cities: List[City]
    name: str = "euclidean_tsp"

    @staticmethod
    def generate(n: int, mode: Union[str, Layout] = Layout.RANDOM, seed: Optional[int] = None,
                 square_size: float = 1.0, name: Optional[str] = None,
                 rng: Optional[random.Random] = None) -> TSPInstance:
        """Place ``n`` cities inside ``[0, square_size]^2``.

        ``rng`` takes precedence over ``seed`` when both are given.
        """
        if n < 2:
            raise InvalidArgument(f"need at least 2 cities, got {n}")
        if square_size <= 0:
            raise InvalidArgument(f"square_size must be positive, got {square_size}")
        try:
            layout = Layout(mode)
        except ValueError:
            raise InvalidArgument(f"unknown layout {mode!r}") from None
        rng = rng if rng is not None else random.Random(seed)

        if layout is Layout.RANDOM:
            coords = [(rng.uniform(0, square_size), rng.uniform(0, square_size)) for _ in range(n)]
        else:
            r = square_size / 2.0
            coords = [(r + r * math.cos(2 * math.pi * k / n), r + r * math.sin(2 * math.pi * k / n))
                      for k in range(n)]
        cities = [City(i, x, y) for i, (x, y) in enumerate(coords)]
        return TSPInstance(cities=cities, name=name or f"{layout.value}{n}")

    @staticmethod
    def from_coords(coords: Sequence[Tuple[float, float]], name: str = "euclidean_tsp") -> TSPInstance:
        if len(coords) < 2:
            raise InvalidArgument(f"need at least 2 cities, got {len(coords)}")
        return TSPInstance([City(i, float(x), float(y)) for i, (x, y) in enumerate(coords)], name=name)

    @property
    def coords(self) -> List[Tuple[float, float]]:
        return [(c.x, c.y) for c in self.cities]

    def n_cities(self) -> int:
        return len(self.cities)

    def distance(self, i: int, j: int) -> float:
        a, b = self.cities[i], self.cities[j]
        return math.hypot(a.x - b.x, a.y - b.y)

    def distance_matrix(self) -> np.ndarray:
        xy = np.array(self.coords, dtype=float)
        diff = xy[:, None, :] - xy[None, :, :]
        D = np.hypot(diff[..., 0], diff[..., 1])
        np.fill_diagonal(D, 0.0)
        return D

    def tour_length(self, tour: Sequence[int]) -> float:
        return score_tour(tour, self)


def score_tour(tour: Sequence[int], instance: TSPInstance) -> float:
    """Length of the closed cycle through ``tour``, closing edge included."""
    n = len(tour)
    dist = 0.0
    for k in range(n):
        dist += instance.distance(tour[k], tour[(k + 1) % n])
    return dist


def tour_length(tour: Sequence[int], D: np.ndarray) -> float:
    """Same as :func:`score_tour` but reads a precomputed distance matrix."""
    idx = np.asarray(tour, dtype=np.intp)
    return float(D[idx, np.roll(idx, -1)].sum())
