from __future__ import annotations
import math
from typing import List

import numpy as np

from .errors import InvalidArgument, InvariantError
from .pheromone import PheromoneMatrix


class TourConstructor:
    """Builds one tour per call with the pseudo-random-proportional rule.

    At each step, with probability q0 the ant moves to the unvisited city
    maximizing tau(r, c) * eta(r, c)**beta; ties go to the lowest city index.
    Otherwise it samples from those weights by cumulative-distribution
    inversion over the unvisited cities in ascending index order. If the
    weights sum to zero (or are not finite) the first unvisited city is taken.

    ``rng`` only needs a ``random()`` method returning floats in [0, 1).
    The pheromone matrix is read, never written.
    """

    def __init__(self, pheromone: PheromoneMatrix, eta: np.ndarray, beta: float, q0: float):
        if beta < 0:
            raise InvalidArgument(f"beta must be >= 0, got {beta}")
        if not 0.0 <= q0 <= 1.0:
            raise InvalidArgument(f"q0 must be in [0, 1], got {q0}")
        eta = np.asarray(eta, dtype=float)
        if eta.shape != pheromone.tau.shape:
            raise InvalidArgument(f"eta shape {eta.shape} does not match pheromone {pheromone.tau.shape}")
        self.pheromone = pheromone
        self.eta = eta
        self.beta = beta
        self.q0 = q0
        self._eta_beta = eta ** beta

    @property
    def n(self) -> int:
        return self.eta.shape[0]

    def weights(self, current: int, candidates: np.ndarray) -> np.ndarray:
        return self.pheromone.tau[current, candidates] * self._eta_beta[current, candidates]

    def choose_next(self, current: int, candidates: np.ndarray, rng) -> int:
        if len(candidates) == 0:
            raise InvariantError(f"no unvisited city left to leave {current} for")
        w = self.weights(current, candidates)
        if rng.random() < self.q0:
            return int(candidates[int(np.argmax(w))])

        total = float(w.sum())
        if total <= 0.0 or not math.isfinite(total):
            return int(candidates[0])
        cdf = np.cumsum(w / total)
        k = int(np.searchsorted(cdf, rng.random(), side="right"))
        if k >= len(candidates):
            # rounding left cdf[-1] just below the draw
            k = int(np.flatnonzero(w)[-1])
        return int(candidates[k])

    def build(self, start: int, rng) -> List[int]:
        n = self.n
        if not 0 <= start < n:
            raise InvalidArgument(f"start city {start} out of range for {n} cities")
        visited = np.zeros(n, dtype=bool)
        visited[start] = True
        tour = [start]
        current = start
        for _ in range(n - 1):
            candidates = np.flatnonzero(~visited)
            nxt = self.choose_next(current, candidates, rng)
            if visited[nxt]:
                raise InvariantError(f"city {nxt} selected twice")
            visited[nxt] = True
            tour.append(nxt)
            current = nxt
        return tour
