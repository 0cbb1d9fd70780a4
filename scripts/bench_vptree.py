#!/usr/bin/env python3
"""
Benchmark harness for the VP-tree.

Measures recall@k against an exact brute-force oracle, wall time per query,
and metric evaluation counts, for vector or string datasets.

Usage:
    python scripts/bench_vptree.py --dataset synthetic_clustered --k 1 10
    python scripts/bench_vptree.py --dataset words --metric levenshtein --n 2000
    python scripts/bench_vptree.py --config bench.yaml --csv out/queries.csv
"""

import argparse
import json
import time
from pathlib import Path
import sys

import numpy as np
import pandas as pd
from tqdm import tqdm
from typing import Dict, List

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from vptree import build, search_parameters_num_results
from vptree.baselines import BruteForceSearcher
from vptree.config import load_benchmark_config
from vptree.utils.data_loader import DataLoader
from vptree.utils.metrics import (
    aggregate_metrics,
    compute_distance_ratio,
    compute_speedup,
    distance_recall_at_k,
    recall_at_k,
)
from vptree.utils.profiling import Profiler
from vptree.utils.visualization import (
    create_results_table,
    plot_dist_count_vs_k,
    plot_leaf_depth_distribution,
)

DATASETS = ['synthetic_uniform', 'synthetic_clustered', 'words', 'word_file']

# Metric used when --metric is not given
DEFAULT_METRICS = {
    'synthetic_uniform': 'euclidean',
    'synthetic_clustered': 'euclidean',
    'words': 'levenshtein',
    'word_file': 'levenshtein',
}


def parse_bool(value: str) -> bool:
    """Parse flexible boolean values from CLI."""
    if isinstance(value, bool):
        return value
    value = value.strip().lower()
    if value in {"1", "true", "yes", "y", "t"}:
        return True
    if value in {"0", "false", "no", "n", "f"}:
        return False
    raise argparse.ArgumentTypeError(f"Invalid boolean value: {value}")


def summarize(values: List[float]) -> dict:
    """Return summary statistics for a list of numeric values."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return {"mean": 0.0, "p50": 0.0, "p95": 0.0, "min": 0.0, "max": 0.0}
    return {
        "mean": float(np.mean(arr)),
        "p50": float(np.percentile(arr, 50)),
        "p95": float(np.percentile(arr, 95)),
        "min": float(np.min(arr)),
        "max": float(np.max(arr)),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Benchmark VP-tree vs exact k-NN")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML file whose keys override the defaults below")
    parser.add_argument("--dataset", type=str, default="synthetic_clustered", choices=DATASETS)
    parser.add_argument("--word-file", type=str, default=None,
                        help="Word list for --dataset word_file")
    parser.add_argument("--metric", type=str, default=None,
                        help="Metric name (default depends on dataset)")
    parser.add_argument("--n", type=int, default=10000, help="Number of items")
    parser.add_argument("--d", type=int, default=8, help="Dimensionality (vector datasets)")
    parser.add_argument("--k", type=int, nargs="+", default=[1, 10], help="Numbers of neighbors")
    parser.add_argument("--n-queries", type=int, default=100, help="Number of queries")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--repeats", type=int, default=1,
                        help="Number of trees built with different seeds")
    parser.add_argument("--out", type=str, default=None, help="Optional JSON output path")
    parser.add_argument("--csv", type=str, default=None, help="Optional per-query CSV path")
    parser.add_argument("--plot-dir", type=str, default=None, help="Optional directory for plots")
    parser.add_argument("--progress", type=parse_bool, default=True,
                        help="Show a progress bar (true/false)")
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    parser = build_parser()
    pre_args, _ = parser.parse_known_args(argv)
    if pre_args.config:
        parser.set_defaults(**load_benchmark_config(pre_args.config))
    args = parser.parse_args(argv)

    # A YAML config may give a single k as a scalar
    if not isinstance(args.k, (list, tuple)):
        args.k = [args.k]
    args.k = [int(k) for k in args.k]
    if any(k < 1 for k in args.k):
        raise ValueError("--k values must be positive")
    if args.n < 1 or args.n_queries < 1 or args.repeats < 1:
        raise ValueError("--n, --n-queries and --repeats must be positive")
    if args.dataset == 'word_file' and not args.word_file:
        raise ValueError("--dataset word_file requires --word-file")
    if args.metric is None:
        args.metric = DEFAULT_METRICS[args.dataset]
    return args


def load_data(args: argparse.Namespace):
    loader = DataLoader(random_state=args.seed)
    if args.dataset == 'word_file':
        return loader.load('word_file', path=args.word_file, n_queries=args.n_queries, limit=args.n)
    if args.dataset == 'words':
        return loader.load('words', n=args.n, n_queries=args.n_queries)
    return loader.load(args.dataset, n=args.n, d=args.d, n_queries=args.n_queries)


def main(argv=None) -> int:
    args = parse_args(argv)
    profiler = Profiler.from_env()

    items, queries = load_data(args)
    n = len(items)

    exact = BruteForceSearcher(args.metric, items).fit()
    max_k = max(args.k)
    truth = [exact.search(q, search_parameters_num_results(max_k)) for q in queries]

    rows: List[Dict] = []
    build_times = []
    results_by_k: Dict[int, Dict] = {}
    dist_counts_by_k: Dict[int, List[int]] = {k: [] for k in args.k}
    tree = None

    for repeat in range(args.repeats):
        with profiler.time("build"):
            tree = build(args.metric, items, random_state=args.seed + repeat)
        build_times.append(tree.build_time)

        for k in args.k:
            params = search_parameters_num_results(k)
            iterator = enumerate(queries)
            if args.progress:
                iterator = tqdm(iterator, total=len(queries), desc=f"repeat={repeat} k={k}", leave=False)

            for i, q in iterator:
                t0 = time.perf_counter()
                with profiler.time("search"):
                    found, stats = tree.search(q, params, return_stats=True)
                elapsed = time.perf_counter() - t0

                true_dists = [d for _, d in truth[i][:k]]
                recall = distance_recall_at_k([d for _, d in found], true_dists)
                # Below 1.0 only when the oracle broke ties differently
                item_recall = recall_at_k([item for item, _ in found], [item for item, _ in truth[i][:k]])
                dist_count = stats["dist_count"]
                dist_counts_by_k[k].append(dist_count)

                rows.append({
                    "repeat": repeat,
                    "k": k,
                    "query": i,
                    "recall": recall,
                    "item_recall": item_recall,
                    "dist_count": dist_count,
                    "scan_ratio": compute_distance_ratio(dist_count, n),
                    # In metric evaluations: brute force always spends n
                    "speedup": compute_speedup(n, dist_count),
                    "time_seconds": elapsed,
                    "kth_distance": found[-1][1] if found else float("nan"),
                })

    df = pd.DataFrame(rows)
    for k in args.k:
        sub = df[df["k"] == k]
        metrics = aggregate_metrics(
            sub["recall"].tolist(), sub["speedup"].tolist(), sub["dist_count"].tolist(), n
        )
        metrics["item_recall"] = summarize(sub["item_recall"].tolist())
        metrics["time_seconds"] = summarize(sub["time_seconds"].tolist())
        results_by_k[k] = metrics

    result = {
        "config": {
            "dataset": args.dataset,
            "metric": args.metric,
            "n": n,
            "d": args.d if args.dataset.startswith("synthetic") else None,
            "k": args.k,
            "n_queries": len(queries),
            "seed": args.seed,
            "repeats": args.repeats,
        },
        "build_time_seconds": summarize(build_times),
        "tree_depth": tree.depth(),
        "build_dist_count": tree.build_dist_count,
        "metrics": {str(k): v for k, v in results_by_k.items()},
    }

    print("VP-tree benchmark")
    print(f"dataset={args.dataset} metric={args.metric} n={n} queries={len(queries)} repeats={args.repeats}")
    print(
        "build_time_s: mean={mean:.4f} min={min:.4f} max={max:.4f}".format(
            **result["build_time_seconds"]
        )
        + f" depth={result['tree_depth']}"
    )
    for k, metrics in results_by_k.items():
        print(create_results_table({"vptree": metrics}, args.dataset, k))
        print(
            "time_per_query_s: mean={mean:.6f} p50={p50:.6f} p95={p95:.6f}".format(
                **metrics["time_seconds"]
            )
        )
    if profiler.enabled:
        print(profiler.format_summary())

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
        print(f"Wrote results to {out_path}")

    if args.csv:
        csv_path = Path(args.csv)
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(csv_path, index=False)
        print(f"Wrote per-query results to {csv_path}")

    if args.plot_dir:
        plot_dir = Path(args.plot_dir)
        plot_dir.mkdir(parents=True, exist_ok=True)
        plot_dist_count_vs_k(dist_counts_by_k, n, save_path=str(plot_dir / "dist_count_vs_k.png"))
        plot_leaf_depth_distribution(tree, save_path=str(plot_dir / "leaf_depths.png"))
        print(f"Wrote plots to {plot_dir}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
