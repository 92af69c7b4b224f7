from __future__ import annotations
import itertools, statistics, os, logging
from typing import Dict, Any, Iterator, List, Optional, Tuple
from dataclasses import asdict
import pandas as pd
from .tsp import TSPInstance
from .colony import ACOConfig, AntColony

logger = logging.getLogger(__name__)


def run_repeated_trials(instance: TSPInstance, cfg: ACOConfig, n_runs: int = 10, base_seed: int = 42):
    """Solve ``instance`` ``n_runs`` times with seeds ``base_seed + r``.

    Returns a stats dict and a list of ``(score, elapsed_sec, best_tour)`` per run.
    """
    D = instance.distance_matrix()
    scores = []
    times = []
    best_tours = []
    for r in range(n_runs):
        cfg_r = ACOConfig(**{**asdict(cfg), "seed": base_seed + r})
        res = AntColony(D, cfg_r).run()
        scores.append(res.best_score)
        times.append(res.elapsed_sec)
        best_tours.append(res.best_tour)
        logger.info("trial %d/%d: best score %.6f", r + 1, n_runs, res.best_score)
    stats = {
        "mean_score": statistics.mean(scores),
        "std_score": statistics.stdev(scores) if len(scores) > 1 else 0.0,
        "min_score": min(scores),
        "max_score": max(scores),
        "median_score": statistics.median(scores),
        "mean_time": statistics.mean(times),
        "n_runs": n_runs,
    }
    return stats, list(zip(scores, times, best_tours))


def grid_configs(param_grid: Dict[str, List[Any]], base_cfg: ACOConfig) -> Iterator[Tuple[Dict[str, Any], ACOConfig]]:
    """Yield ``(overrides, config)`` for every point of the grid, keys in sorted order.

    Every config is validated before it is yielded.
    """
    keys = sorted(param_grid)
    base = base_cfg.to_dict()
    for values in itertools.product(*(param_grid[k] for k in keys)):
        overrides = dict(zip(keys, values))
        yield overrides, ACOConfig.from_dict({**base, **overrides})


def run_parameter_sweep(instance: TSPInstance, param_grid: Dict[str, List[Any]],
                        base_cfg: Optional[ACOConfig] = None, n_runs: int = 5, base_seed: int = 100,
                        csv_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """Run repeated trials for every combination in ``param_grid``.

    Each combination yields one row (its overrides plus the trial stats). With
    ``csv_path`` each row is appended as soon as it is computed, so a long
    sweep keeps its partial results.
    """
    # materialize first so a bad grid value fails before any run
    points = list(grid_configs(param_grid, base_cfg or ACOConfig()))
    rows = []
    for i, (overrides, cfg) in enumerate(points, start=1):
        logger.info("sweep point %d/%d: %s", i, len(points), overrides)
        stats, _ = run_repeated_trials(instance, cfg, n_runs=n_runs, base_seed=base_seed)
        row = {**overrides, **stats}
        rows.append(row)
        if csv_path is not None:
            pd.DataFrame([row]).to_csv(csv_path, mode="a", index=False,
                                       header=not os.path.exists(csv_path))
    return rows
