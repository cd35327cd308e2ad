#!/usr/bin/env python
import argparse, logging
from pathlib import Path
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from scipy.stats import friedmanchisquare
from metaopt.config import load_config, problem_from_config
from metaopt.registry import build

log = logging.getLogger("run_benchmark")

def run_all(block:dict, runs:int, seed0:int):
    problem = problem_from_config(block["problem"])
    rows, histories = [], {}
    for name, params in block["algorithms"].items():
        histories[name] = []
        for r in range(runs):
            p = dict(params or {}); p["seed"] = seed0 + r
            out = build(name, problem, p).run()
            rows.append({"method": name, "run": r + 1, "cost": out.best_cost,
                         "evaluations": out.evaluations, "iterations": out.iterations,
                         "time_s": out.elapsed, "reason": out.reason.name})
            histories[name].append(out.history)
        log.info("%s done (%d runs)", name, runs)
    return problem, pd.DataFrame(rows), histories

def plot_convergence(histories:dict, path:Path, title:str):
    plt.figure(figsize=(10, 6))
    for algo, hs in histories.items():
        hs = [h for h in hs if h]
        if not hs:
            continue
        maxlen = max(len(h) for h in hs)
        # pad with final value to align runs of different length
        M = np.array([h + [h[-1]] * (maxlen - len(h)) for h in hs], dtype=float)
        M[~np.isfinite(M)] = np.nan
        m, s = np.nanmean(M, axis=0), np.nanstd(M, axis=0)
        plt.plot(m, label=algo)
        plt.fill_between(range(maxlen), m - s, m + s, alpha=0.2)
    plt.title(title)
    plt.xlabel('Iteration')
    plt.ylabel('Best cost')
    plt.xscale('log')
    plt.legend()
    plt.grid(True)
    plt.tight_layout()
    plt.savefig(path, dpi=200)
    plt.close()

def main(cfg_path:str, section:str|None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    logging.getLogger("metaopt").setLevel(logging.WARNING)
    cfg = load_config(cfg_path)
    block = cfg[section] if section else cfg
    runs, seed0 = int(cfg.get("runs", 5)), int(cfg.get("seed", 42))
    out_dir = Path(cfg.get("out_dir", "results")); out_dir.mkdir(parents=True, exist_ok=True)
    problem, df, histories = run_all(block, runs, seed0)
    df.to_csv(out_dir / f"runs_{problem.name}.csv", index=False)
    summary = df.groupby("method", sort=False)["cost"].agg(["mean", "std", "min", "max"])
    summary["time_s"] = df.groupby("method", sort=False)["time_s"].mean()
    summary.to_csv(out_dir / f"summary_{problem.name}.csv")
    print(f"Summary ({problem.name}, {runs} runs):")
    print(summary.to_string(float_format=lambda v: f"{v:.4f}"))
    if problem.known_optimum is not None:
        print(f"known optimum: {problem.known_optimum:.4f}")
    wide = df.pivot(index="run", columns="method", values="cost")
    if wide.shape[1] >= 3 and runs >= 2 and np.isfinite(wide.values).all():
        stat, p = friedmanchisquare(*[wide[c].values for c in wide.columns])
        print(f"Friedman chi2={stat:.3f}, p={p:.4g}")
    plot_convergence(histories, out_dir / f"convergence_{problem.name}.png",
                     f"Average convergence on {problem.name} ({runs} runs)")

if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default="configs/main.yaml")
    ap.add_argument("--section", default=None, help="nested block of the config, e.g. 'continuous'")
    a = ap.parse_args()
    main(a.config, a.section)
