from __future__ import annotations
from typing import Sequence

import numpy as np

from .errors import InvalidArgument


class PheromoneMatrix:
    """Learned edge desirability tau, indexed by directed edge (from, to).

    Within a generation every deposit is applied before the single
    evaporation. Deposits are additive, so their order does not matter.
    """

    def __init__(self, n: int, tau0: float = 1.0):
        if n < 2:
            raise InvalidArgument(f"need at least 2 cities, got {n}")
        if tau0 < 0:
            raise InvalidArgument(f"tau0 must be non-negative, got {tau0}")
        self.tau = np.full((n, n), float(tau0))

    @classmethod
    def initialize(cls, n: int, tau0: float = 1.0) -> PheromoneMatrix:
        return cls(n, tau0)

    @property
    def n(self) -> int:
        return self.tau.shape[0]

    def __getitem__(self, edge):
        return self.tau[edge]

    def deposit(self, from_city: int, to_city: int, amount: float):
        if amount < 0:
            raise InvalidArgument(f"deposit amount must be non-negative, got {amount}")
        self.tau[from_city, to_city] += amount

    def deposit_tour(self, tour: Sequence[int], amount: float, symmetric: bool = False):
        """Deposit ``amount`` on each of the N edges of the closed tour."""
        if amount < 0:
            raise InvalidArgument(f"deposit amount must be non-negative, got {amount}")
        self.stage_tour(self.tau, tour, amount, symmetric=symmetric)

    def staging(self) -> np.ndarray:
        """Zeroed buffer shaped like tau, for deposits merged later in one step."""
        return np.zeros_like(self.tau)

    @staticmethod
    def stage_tour(buffer: np.ndarray, tour: Sequence[int], amount: float, symmetric: bool = False):
        src = np.asarray(tour, dtype=np.intp)
        dst = np.roll(src, -1)
        # add.at accumulates repeated edges (n == 2 visits 0->1 and 1->0)
        np.add.at(buffer, (src, dst), amount)
        if symmetric:
            np.add.at(buffer, (dst, src), amount)

    def merge(self, buffer: np.ndarray):
        if buffer.shape != self.tau.shape:
            raise InvalidArgument(f"buffer shape {buffer.shape} does not match {self.tau.shape}")
        self.tau += buffer

    def evaporate(self, rho: float):
        if not 0.0 <= rho < 1.0:
            raise InvalidArgument(f"rho must be in [0, 1), got {rho}")
        self.tau *= (1.0 - rho)
