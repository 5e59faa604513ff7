# main.py
# Demo: riempie un filtro dimensionato per EXPECTED_COUNT elementi e verifica
# che nessun elemento inserito venga perso (zero falsi negativi).

import argparse
import logging
import sys
import time
from typing import List, Optional

from bloom_filter import BloomFilter
from hashing import HASH_NAME


# ============================================================
# CONFIGURAZIONE
# ============================================================

EXPECTED_COUNT = 10_000
FALSE_POSITIVE_PROBABILITY = 0.01
START = 10_000


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def run_demo(expected: int = EXPECTED_COUNT, probability: float = FALSE_POSITIVE_PROBABILITY,
             start: int = START, hash_name: str = HASH_NAME) -> List[int]:
    """Inserisce start..start+expected-1, li cerca di nuovo e ritorna quelli mancanti."""
    bf = BloomFilter.from_false_positive_probability(probability, expected, hash_name=hash_name)
    elements = range(start, start + expected)

    t0 = time.perf_counter()
    bf.add_all(elements)
    t_build = time.perf_counter() - t0

    t0 = time.perf_counter()
    missing = [i for i in elements if not bf.contains(i)]
    t_verify = time.perf_counter() - t0

    for i in missing:
        print(i)

    logging.info("Build %.3fs, verify %.3fs", t_build, t_verify)
    print(f"m={bf.bit_array_size} k={bf.k} inseriti={bf.actual_count} "
          f"mancanti={len(missing)} fpp stimata={bf.estimated_false_positive_probability():.5f}")
    return missing


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Demo Bloom Filter: nessun falso negativo")
    parser.add_argument("--expected", type=int, default=EXPECTED_COUNT, help="Elementi previsti e inseriti")
    parser.add_argument("--fpp", type=float, default=FALSE_POSITIVE_PROBABILITY,
                        help="Probabilita' di falso positivo desiderata")
    parser.add_argument("--start", type=int, default=START, help="Primo intero inserito")
    parser.add_argument("--hash-name", default=HASH_NAME, help="Digest hashlib (es. md5, sha256) oppure murmur3")
    parser.add_argument("--verbose", action="store_true", help="Log a livello DEBUG")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    missing = run_demo(args.expected, args.fpp, args.start, args.hash_name)
    return 1 if missing else 0


if __name__ == "__main__":
    sys.exit(main())
