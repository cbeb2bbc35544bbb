#!/usr/bin/env python3
"""
B-Tree Operation Benchmark
==========================

Times insert, search and delete on shuffled integer workloads for a few
branch factors, so the effect of node width on each operation is visible.
"""

import time
import random
import statistics
import argparse
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../')))

from keytree import BTree
from keytree.config import configure_logging, get_config


def time_per_op(operation, keys):
    """Mean microseconds per call of ``operation`` over ``keys``"""
    samples = []
    for key in keys:
        start = time.perf_counter()
        operation(key)
        samples.append((time.perf_counter() - start) * 1_000_000)
    return statistics.mean(samples)


def benchmark_branch_factor(branch_factor: int, size: int, seed: int):
    rng = random.Random(seed)
    keys = list(range(size))
    rng.shuffle(keys)

    tree = BTree(branch_factor)
    insert_us = time_per_op(tree.insert, keys)
    height = tree.height

    probes = rng.sample(range(2 * size), min(size, 1000))
    search_us = time_per_op(tree.search, probes)

    rng.shuffle(keys)
    delete_us = time_per_op(tree.delete, keys)

    return insert_us, search_us, delete_us, height


def main():
    """Run all benchmarks"""
    parser = argparse.ArgumentParser(description="keytree B-Tree benchmark")
    parser.add_argument("--sizes", type=int, nargs="+", default=[1000, 10000, 50000])
    parser.add_argument("--branch-factors", type=int, nargs="+", default=[2, 4, 16, 64])
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    configure_logging(get_config().log_level)

    print("=" * 70)
    print("keytree B-Tree Benchmark")
    print("=" * 70)

    for size in args.sizes:
        print(f"\nDataset: {size:,} keys")
        print("-" * 70)
        print(f"  {'t':>4} {'height':>7} {'insert us':>11} {'search us':>11} {'delete us':>11}")
        for branch_factor in args.branch_factors:
            insert_us, search_us, delete_us, height = benchmark_branch_factor(
                branch_factor, size, args.seed
            )
            print(f"  {branch_factor:>4} {height:>7} {insert_us:>11.2f} {search_us:>11.2f} {delete_us:>11.2f}")

    print("\n" + "=" * 70)
    print("Benchmark Complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
