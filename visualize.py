import os, argparse, logging
import matplotlib.pyplot as plt
import imageio

from acotsp import TSPInstance, ACOConfig, AntColony


def tour_to_xy(coords, tour):
    xs = [coords[i][0] for i in tour] + [coords[tour[0]][0]]
    ys = [coords[i][1] for i in tour] + [coords[tour[0]][1]]
    return xs, ys


def visualize(inst, cfg, outdir, step=5):
    """Render one frame per ``step`` generations: best-so-far tour beside the score trajectory."""
    os.makedirs(outdir, exist_ok=True)
    colony = AntColony.from_instance(inst, cfg)
    res = colony.run()

    coords = inst.coords
    cx = [c[0] for c in coords]
    cy = [c[1] for c in coords]
    frames = []
    iters = list(range(0, len(colony.history_best_tours), step))
    if iters[-1] != len(colony.history_best_tours) - 1:
        iters.append(len(colony.history_best_tours) - 1)
    for it in iters:
        tour = colony.history_best_tours[it]
        L = res.score_history[it]
        xs, ys = tour_to_xy(coords, tour)

        fig, (ax_tour, ax_score) = plt.subplots(1, 2, figsize=(10, 5))
        ax_tour.plot(cx, cy, "o")
        ax_tour.plot(xs, ys, "-")
        ax_tour.set_title(f"best-so-far\niter={it+1}  length={L:.4f}")
        ax_tour.set_aspect("equal", adjustable="box")
        ax_score.plot(range(1, it + 2), res.score_history[:it + 1])
        ax_score.set_xlim(1, len(res.score_history))
        ax_score.set_ylim(min(res.score_history) * 0.98, max(res.score_history) * 1.02)
        ax_score.set_xlabel("Iteration")
        ax_score.set_ylabel("Best-so-far tour length")
        fig.tight_layout()
        frame_path = os.path.join(outdir, f"frame_{it:04d}.png")
        fig.savefig(frame_path, dpi=100, bbox_inches="tight")
        plt.close(fig)
        frames.append(frame_path)

    gif_path = os.path.join(outdir, "aco_convergence.gif")
    with imageio.get_writer(gif_path, mode="I", duration=0.4) as writer:
        for fp in frames:
            writer.append_data(imageio.v2.imread(fp))
    for fp in frames:
        os.remove(fp)

    print("Saved:", gif_path)
    return gif_path


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--n", type=int, default=50, help="number of cities")
    p.add_argument("--layout", choices=["random", "circle"], default="random")
    p.add_argument("--iters", type=int, default=120)
    p.add_argument("--ants", type=int, default=20)
    p.add_argument("--q0", type=float, default=0.2770)
    p.add_argument("--beta", type=float, default=2.0)
    p.add_argument("--rho", type=float, default=0.4817)
    p.add_argument("--seed", type=int, default=321)
    p.add_argument("--outdir", default="viz")
    p.add_argument("--step", type=int, default=5, help="frame every k iterations")
    args = p.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    inst = TSPInstance.generate(args.n, args.layout, seed=args.seed, square_size=100.0, name=f"viz{args.n}")
    cfg = ACOConfig(q0=args.q0, n_ants=args.ants, beta=args.beta, n_iterations=args.iters,
                    n_cities=args.n, rho=args.rho, layout=args.layout, seed=args.seed)
    visualize(inst, cfg, args.outdir, step=args.step)


if __name__ == "__main__":
    main()
