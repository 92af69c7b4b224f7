# run_experiments.py
import os, json, argparse, logging
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from acotsp import ACOConfig, AntColony, InvalidArgument
from acotsp.experiments import run_repeated_trials, run_parameter_sweep

CONFIG_FLAGS = ("q0", "n_ants", "beta", "n_iterations", "n_cities", "Q", "rho",
                "tau0", "layout", "square_size", "seed", "n_workers")


def ensure(path: str) -> str:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    return path


def build_config(args) -> ACOConfig:
    """Config file first, then any flag given on the command line on top."""
    data = ACOConfig.from_json(args.config).to_dict() if args.config else {}
    for name in CONFIG_FLAGS:
        value = getattr(args, name)
        if value is not None:
            data[name] = value
    if args.symmetric_deposit:
        data["symmetric_deposit"] = True
    return ACOConfig.from_dict(data)


def plot_convergence(score_history, save_path, title="ACO convergence"):
    plt.figure()
    plt.plot(range(1, len(score_history) + 1), score_history)
    plt.xlabel("Iteration")
    plt.ylabel("Best-so-far tour length")
    plt.title(title)
    ensure(save_path)
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def plot_tour(coords, tour, save_path, title):
    xs = [coords[i][0] for i in tour] + [coords[tour[0]][0]]
    ys = [coords[i][1] for i in tour] + [coords[tour[0]][1]]
    plt.figure(figsize=(5, 5))
    plt.plot([c[0] for c in coords], [c[1] for c in coords], "o")
    plt.plot(xs, ys, "-")
    plt.title(title)
    plt.axis("equal")
    plt.tight_layout()
    ensure(save_path)
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def plot_scatter(details, save_path):
    plt.figure()
    scores = [s for (s, t, tour) in details]
    x = np.random.normal(loc=1, scale=0.03, size=len(scores))
    plt.plot(x, scores, "o")
    plt.xticks([1], ["ACO"])
    plt.ylabel("Best tour length")
    plt.title("Best lengths across runs")
    ensure(save_path)
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()


def main():
    ap = argparse.ArgumentParser(description="Ant colony optimization for the Euclidean TSP.")
    ap.add_argument("--config", default=None, help="JSON file with ACOConfig fields")
    ap.add_argument("--q0", type=float, default=None, help="exploitation probability in [0, 1]")
    ap.add_argument("--ants", dest="n_ants", type=int, default=None)
    ap.add_argument("--beta", type=float, default=None, help="heuristic weight exponent")
    ap.add_argument("--iters", dest="n_iterations", type=int, default=None)
    ap.add_argument("--n", dest="n_cities", type=int, default=None, help="number of cities")
    ap.add_argument("--Q", type=float, default=None, help="deposit factor")
    ap.add_argument("--rho", type=float, default=None, help="evaporation rate in [0, 1)")
    ap.add_argument("--tau0", type=float, default=None)
    ap.add_argument("--layout", choices=["random", "circle"], default=None)
    ap.add_argument("--square", dest="square_size", type=float, default=None)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--workers", dest="n_workers", type=int, default=None, help="threads building ants")
    ap.add_argument("--symmetric-deposit", action="store_true", help="deposit on both edge directions")
    ap.add_argument("--runs", type=int, default=1, help="repeated seeded trials (>1 enables)")
    ap.add_argument("--sweep", action="store_true", help="grid over q0, n_ants and rho")
    ap.add_argument("--outdir", default=os.path.join(os.path.dirname(os.path.abspath(__file__)), "results"))
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    try:
        cfg = build_config(args)
    except (InvalidArgument, OSError, json.JSONDecodeError) as e:
        ap.error(str(e))

    inst, colony = AntColony.from_config(cfg)
    res = colony.run()
    summary = {"instance": inst.name, "best_score": res.best_score,
               "elapsed_sec": res.elapsed_sec, **cfg.to_dict()}
    print(json.dumps(summary, indent=2))

    pd.DataFrame.from_records([summary]).to_csv(ensure(os.path.join(args.outdir, "results_summary.csv")), index=False)
    pd.DataFrame({"iteration": range(1, len(res.score_history) + 1), "best_score": res.score_history}) \
        .to_csv(os.path.join(args.outdir, "score_history.csv"), index=False)
    with open(os.path.join(args.outdir, "best_tour.json"), "w") as f:
        json.dump({"best_tour": res.best_tour, "best_score": res.best_score}, f)
    plot_convergence(res.score_history, os.path.join(args.outdir, "convergence.png"))
    plot_tour(inst.coords, res.best_tour, os.path.join(args.outdir, "best_tour.png"),
              f"Best tour\nlength={res.best_score:.4f}")

    if args.runs > 1:
        stats, details = run_repeated_trials(inst, cfg, n_runs=args.runs)
        print("trials", json.dumps(stats, indent=2))
        pd.DataFrame.from_records([stats]).to_csv(os.path.join(args.outdir, "trials_summary.csv"), index=False)
        plot_scatter(details, os.path.join(args.outdir, "results_distribution.png"))

    # grid over the parameters the tuned defaults came from
    if args.sweep:
        grid = {"q0": [0.1, 0.3, 0.5], "n_ants": [10, 20], "rho": [0.3, 0.5, 0.7]}
        rows = run_parameter_sweep(inst, grid, base_cfg=cfg, n_runs=3, base_seed=500,
                                   csv_path=os.path.join(args.outdir, "param_grid.csv"))
        best = min(rows, key=lambda r: r["mean_score"])
        print("Grid search evaluated:", len(rows))
        print("Best setting:", json.dumps(best, indent=2))


if __name__ == "__main__":
    main()
