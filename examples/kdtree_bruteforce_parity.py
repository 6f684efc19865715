"""Parity check for KD-tree queries against a brute-force scan.

This script builds a mean-split KD-tree and a linear-scan index over the same
random point cloud, runs nearest and k-nearest queries against both, and
reports agreement and timing metrics.
"""

from __future__ import annotations

import argparse
import logging
import time

import jax
import jax.numpy as jnp

from mimirax import IndexConfig, build_index


def _make_problem(n: int, n_probes: int, dim: int, seed: int) -> tuple[jax.Array, jax.Array]:
    key = jax.random.PRNGKey(seed)
    k1, k2 = jax.random.split(key)
    points = jax.random.uniform(k1, (n, dim), minval=-1.0, maxval=1.0)
    probes = jax.random.uniform(k2, (n_probes, dim), minval=-1.2, maxval=1.2)
    return points, probes


def _timed(fn):
    start = time.perf_counter()
    out = fn()
    return out, time.perf_counter() - start


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--n-points", type=int, default=2048)
    parser.add_argument("--n-probes", type=int, default=64)
    parser.add_argument("--dim", type=int, default=3)
    parser.add_argument("--k", type=int, default=8)
    parser.add_argument("--knn-backend", type=str, default="tree")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    config = IndexConfig(knn_backend=args.knn_backend)
    points, probes = _make_problem(args.n_points, args.n_probes, args.dim, args.seed)

    kdtree, t_kd_build = _timed(lambda: build_index(points, config=config))
    linear, t_lin_build = _timed(
        lambda: build_index(points, index_type="linear", config=config)
    )

    kd_nearest, t_kd_nearest = _timed(lambda: [kdtree.nearest(p).value for p in probes])
    lin_nearest, t_lin_nearest = _timed(lambda: [linear.nearest(p).value for p in probes])

    kd_knn, t_kd_knn = _timed(
        lambda: [[q.value for q in kdtree.nearest_k(p, args.k)] for p in probes]
    )
    lin_knn, t_lin_knn = _timed(
        lambda: [[q.value for q in linear.nearest_k(p, args.k)] for p in probes]
    )

    nearest_matches = sum(int(a == b) for a, b in zip(kd_nearest, lin_nearest))
    knn_matches = sum(int(a == b) for a, b in zip(kd_knn, lin_knn))

    print("jax:", jax.__version__)
    print("device:", jax.devices()[0])
    print("config:", vars(args))
    print(
        "kdtree_build:",
        {
            "seconds": t_kd_build,
            "depth": kdtree.build_stats.max_depth,
            "leaves": kdtree.build_stats.leaf_count,
        },
    )
    print("linear_build:", {"seconds": t_lin_build})
    print(
        "nearest_parity:",
        {
            "matches": nearest_matches,
            "probes": int(probes.shape[0]),
            "kdtree_seconds": t_kd_nearest,
            "linear_seconds": t_lin_nearest,
        },
    )
    print(
        "nearest_k_parity:",
        {
            "matches": knn_matches,
            "probes": int(probes.shape[0]),
            "kdtree_seconds": t_kd_knn,
            "linear_seconds": t_lin_knn,
        },
    )
    print("max_coordinate:", float(jnp.max(jnp.abs(points))))


if __name__ == "__main__":
    main()
