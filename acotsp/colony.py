from __future__ import annotations
import json
import logging
import math
import numbers
import random
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from .construction import TourConstructor
from .errors import InvalidArgument, InvariantError
from .heuristic import build_heuristic
from .pheromone import PheromoneMatrix
from .tsp import Layout, TSPInstance, tour_length

logger = logging.getLogger(__name__)


@dataclass
class ACOConfig:
    q0: float = 0.2770          # exploitation probability
    n_ants: int = 20
    beta: float = 1.0           # heuristic influence
    n_iterations: int = 1000
    n_cities: int = 100         # only used when the colony generates its own instance
    Q: float = 1.0              # pheromone deposit factor
    rho: float = 0.4817         # evaporation rate
    tau0: float = 1.0           # initial pheromone
    layout: str = "random"
    square_size: float = 1.0
    seed: Optional[int] = None
    n_workers: int = 1          # >1 builds ants on a thread pool
    symmetric_deposit: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self):
        for name in ("n_ants", "n_iterations", "n_cities", "n_workers"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidArgument(f"{name} must be an integer, got {value!r}")
        for name in ("q0", "beta", "Q", "rho", "tau0", "square_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidArgument(f"{name} must be a number, got {value!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral)):
            raise InvalidArgument(f"seed must be an integer or None, got {self.seed!r}")
        if not isinstance(self.symmetric_deposit, bool):
            raise InvalidArgument(f"symmetric_deposit must be a bool, got {self.symmetric_deposit!r}")

        # written so that NaN fails every range check
        if not 0.0 <= self.q0 <= 1.0:
            raise InvalidArgument(f"q0 must be in [0, 1], got {self.q0}")
        if not 0.0 <= self.rho < 1.0:
            raise InvalidArgument(f"rho must be in [0, 1), got {self.rho}")
        if self.n_ants <= 0:
            raise InvalidArgument(f"n_ants must be positive, got {self.n_ants}")
        if self.n_iterations <= 0:
            raise InvalidArgument(f"n_iterations must be positive, got {self.n_iterations}")
        if self.n_cities < 2:
            raise InvalidArgument(f"n_cities must be >= 2, got {self.n_cities}")
        if not (math.isfinite(self.beta) and self.beta >= 0):
            raise InvalidArgument(f"beta must be finite and >= 0, got {self.beta}")
        if not (math.isfinite(self.Q) and self.Q > 0):
            raise InvalidArgument(f"Q must be finite and positive, got {self.Q}")
        if not (math.isfinite(self.tau0) and self.tau0 >= 0):
            raise InvalidArgument(f"tau0 must be finite and non-negative, got {self.tau0}")
        if not (math.isfinite(self.square_size) and self.square_size > 0):
            raise InvalidArgument(f"square_size must be finite and positive, got {self.square_size}")
        if self.n_workers <= 0:
            raise InvalidArgument(f"n_workers must be positive, got {self.n_workers}")
        if not isinstance(self.layout, str) or self.layout not in {m.value for m in Layout}:
            raise InvalidArgument(f"unknown layout {self.layout!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ACOConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidArgument(f"unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path) -> ACOConfig:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise InvalidArgument(f"{path}: expected a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchState:
    best_tour: List[int]
    best_score: float
    score_history: List[float] = field(default_factory=list)
    generation: int = 0

    def consider(self, tour: List[int], score: float) -> bool:
        """Adopt ``tour`` if strictly shorter than the best so far."""
        if score < self.best_score:
            self.best_tour = list(tour)
            self.best_score = score
            return True
        return False


@dataclass
class ACOResult:
    best_tour: List[int]
    best_score: float
    score_history: List[float]
    config: ACOConfig
    elapsed_sec: float


class AntColony:
    """Ant colony over a symmetric distance matrix.

    ``iterate`` runs one generation; ``run`` runs ``cfg.n_iterations`` of them.
    ``rng`` may be any object with ``random()`` and ``randrange(n)``; it
    defaults to ``random.Random(cfg.seed)``. When ``cfg.n_workers > 1`` each
    ant gets its own ``random.Random`` seeded from ``rng``, so a run is
    reproducible for a fixed seed and worker setting.
    """

    def __init__(self, dist_matrix, cfg: ACOConfig, rng=None):
        D = np.asarray(dist_matrix, dtype=float)
        if D.ndim != 2 or D.shape[0] != D.shape[1]:
            raise InvalidArgument(f"distance matrix must be square, got shape {D.shape}")
        if D.shape[0] < 2:
            raise InvalidArgument(f"need at least 2 cities, got {D.shape[0]}")
        self.D = D
        self.n = D.shape[0]
        self.cfg = cfg
        self.rng = rng if rng is not None else random.Random(cfg.seed)

        self.eta = build_heuristic(D)
        self.pheromone = PheromoneMatrix.initialize(self.n, cfg.tau0)
        self.constructor = TourConstructor(self.pheromone, self.eta, cfg.beta, cfg.q0)

        initial = list(range(self.n))
        self.state = SearchState(best_tour=initial, best_score=tour_length(initial, D))
        # per-generation best-so-far tour, for animation
        self.history_best_tours: List[List[int]] = []

    @classmethod
    def from_instance(cls, instance: TSPInstance, cfg: ACOConfig, rng=None) -> AntColony:
        return cls(instance.distance_matrix(), cfg, rng=rng)

    @classmethod
    def from_config(cls, cfg: ACOConfig, rng=None) -> Tuple[TSPInstance, AntColony]:
        """Generate ``cfg.n_cities`` cities with ``cfg.layout`` and build a colony on them."""
        instance = TSPInstance.generate(cfg.n_cities, cfg.layout, seed=cfg.seed, square_size=cfg.square_size)
        return instance, cls.from_instance(instance, cfg, rng=rng)

    @property
    def best_tour(self) -> List[int]:
        return self.state.best_tour

    @property
    def best_score(self) -> float:
        return self.state.best_score

    @property
    def score_history(self) -> List[float]:
        return self.state.score_history

    def _run_ant(self, rng) -> Tuple[List[int], float]:
        start = rng.randrange(self.n)
        tour = self.constructor.build(start, rng)
        if len(tour) != self.n or len(set(tour)) != self.n:
            raise InvariantError(f"constructed tour is not a permutation: {tour}")
        return tour, tour_length(tour, self.D)

    def iterate(self, executor: Optional[Executor] = None) -> List[Tuple[List[int], float]]:
        """One generation: build all ants, fold them into the state, update tau.

        Returns the (tour, score) pairs of this generation's ants.
        """
        if executor is None:
            ants = [self._run_ant(self.rng) for _ in range(self.cfg.n_ants)]
        else:
            ant_rngs = [random.Random(self.rng.randrange(2**63)) for _ in range(self.cfg.n_ants)]
            ants = list(executor.map(self._run_ant, ant_rngs))

        for tour, score in ants:
            if self.state.consider(tour, score):
                logger.debug("generation %d: new best %.6f", self.state.generation + 1, score)

        # all deposits land before the single evaporation
        staged = self.pheromone.staging()
        for tour, score in ants:
            # zero-length tour (all cities coincident): no deposit
            amount = self.cfg.Q / score if score > 0 else 0.0
            self.pheromone.stage_tour(staged, tour, amount, symmetric=self.cfg.symmetric_deposit)
        self.pheromone.merge(staged)
        self.pheromone.evaporate(self.cfg.rho)

        self.state.generation += 1
        return ants

    def run(self, callback: Optional[Callable[[int, SearchState], None]] = None) -> ACOResult:
        """Run the configured number of generations.

        ``callback(generation, state)`` is invoked after each generation.
        """
        start = time.time()
        self.state.score_history = []
        self.history_best_tours = []
        logger.info("running ACO on %d cities: %s", self.n, self.cfg)
        logger.info("initial score %.6f", self.state.best_score)

        executor = ThreadPoolExecutor(max_workers=self.cfg.n_workers) if self.cfg.n_workers > 1 else None
        try:
            for _ in range(self.cfg.n_iterations):
                self.iterate(executor)
                self.state.score_history.append(self.state.best_score)
                self.history_best_tours.append(list(self.state.best_tour))
                logger.debug("generation %d: best %.6f", self.state.generation, self.state.best_score)
                if callback is not None:
                    callback(self.state.generation, self.state)
        finally:
            if executor is not None:
                executor.shutdown()

        elapsed = time.time() - start
        logger.info("finished %d generations in %.2fs, best score %.6f",
                    self.cfg.n_iterations, elapsed, self.state.best_score)
        return ACOResult(best_tour=list(self.state.best_tour), best_score=self.state.best_score,
                         score_history=list(self.state.score_history), config=self.cfg, elapsed_sec=elapsed)
