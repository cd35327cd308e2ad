#!/usr/bin/env python
import argparse, logging
from metaopt.config import load_config, problem_from_config
from metaopt.registry import build

def main(cfg_path:str, algo:str, section:str|None, seed:int|None, verbose:bool):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO,
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    cfg = load_config(cfg_path)
    block = cfg[section] if section else cfg
    problem = problem_from_config(block["problem"])
    params = dict(block.get("algorithms", {}).get(algo.upper()) or {})
    params.setdefault("seed", int(seed if seed is not None else cfg.get("seed", 42)))
    out = build(algo, problem, params).run()
    print(f"{out.algorithm} on {problem.name}: best={out.best_cost:.6g} "
          f"iters={out.iterations} evals={out.evaluations} ({out.reason.value}, {out.elapsed:.2f}s)")
    if problem.known_optimum is not None:
        print(f"known optimum: {problem.known_optimum:.6g}")

if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default="configs/main.yaml")
    ap.add_argument("--algo", default="SA")
    ap.add_argument("--section", default=None, help="nested block of the config, e.g. 'continuous'")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("-v", "--verbose", action="store_true")
    a = ap.parse_args()
    main(a.config, a.algo, a.section, a.seed, a.verbose)
