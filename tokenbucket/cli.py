"""Command line entry point"""
import argparse
import threading
from datetime import timedelta
from typing import List, Optional, Tuple

from tokenbucket.core.bucket import TokenBucket, with_clock, with_prohibit_overflow
from tokenbucket.core.clock import MockClock
from tokenbucket.core.errors import TokenBucketError
from tokenbucket.core.factory import bucket_from_config
from tokenbucket.utils.config import config
from tokenbucket.utils.logger import logger, setup_logging


def run_simulation(
    capacity: int,
    quantum: int,
    fill_interval: float,
    workers: int,
    count: int,
    prohibit_overflow: bool = False
) -> List[Tuple[int, timedelta]]:
    """
    Run `workers` threads that each take `count` tokens from one bucket.

    The bucket runs on a MockClock, so no real time passes: each worker
    gets back the wait its reservation was granted.

    Returns:
        (worker index, granted wait) ordered by granted wait, which is the
        order the reservations were made
    """
    if workers < 1:
        raise ValueError("workers must be >= 1")

    options = [with_clock(MockClock())]
    if prohibit_overflow:
        options.append(with_prohibit_overflow())
    bucket = TokenBucket(capacity, quantum, fill_interval, *options)

    results: List[Tuple[int, timedelta]] = []
    errors: List[TokenBucketError] = []
    results_lock = threading.Lock()
    start = threading.Barrier(workers)

    def worker(i: int):
        start.wait()
        try:
            wait = bucket.take(count)
        except TokenBucketError as e:
            with results_lock:
                errors.append(e)
            return
        with results_lock:
            results.append((i, wait))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    if errors:
        raise errors[0]
    # granted waits grow with reservation order; workers served from the burst tie at zero
    results.sort(key=lambda r: r[1])
    return results


def cmd_simulate(args) -> int:
    print("\n" + "=" * 60)
    print("TOKEN BUCKET SIMULATION (mock clock)")
    print("=" * 60)
    print(f"Capacity: {args.capacity}, quantum: {args.quantum}, fill interval: {args.interval}s")
    print(f"Workers: {args.workers}, tokens per worker: {args.count}\n")

    try:
        results = run_simulation(
            args.capacity,
            args.quantum,
            args.interval,
            args.workers,
            args.count,
            prohibit_overflow=args.prohibit_overflow,
        )
    except (TokenBucketError, ValueError) as e:
        logger.error(f"Simulation failed: {e}")
        return 1

    for position, (worker, wait) in enumerate(results):
        print(f"   #{position:<3} worker {worker:<3} waited {wait.total_seconds():8.3f}s")
    return 0


def cmd_show(args) -> int:
    names = config.rate_limit_names() if args.all else [args.name]
    if not names:
        print(f"No rate limits configured in {config.config_path}")
        return 1

    for name in names:
        try:
            bucket = bucket_from_config(name, config)
        except (KeyError, ValueError) as e:
            logger.error(str(e))
            return 1
        print(f"{name}:")
        print(f"   capacity:          {bucket.capacity}")
        print(f"   quantum:           {bucket.quantum}")
        print(f"   fill interval:     {bucket.fill_interval.total_seconds()}s")
        print(f"   rate:              {bucket.rate:.3f} tokens/s")
        print(f"   prohibit overflow: {bucket.prohibit_overflow}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Token bucket rate limiter tools")
    parser.add_argument("--log-level", default=None, help="Override log level (DEBUG, INFO, ...)")
    sub = parser.add_subparsers(dest="mode", required=True)

    sim = sub.add_parser("simulate", help="Queue concurrent takers on a mock-clock bucket")
    sim.add_argument("--capacity", type=int, default=1, help="Bucket capacity")
    sim.add_argument("--quantum", type=int, default=1, help="Tokens added per fill interval")
    sim.add_argument("--interval", type=float, default=1.0, help="Fill interval in seconds")
    sim.add_argument("--workers", type=int, default=10, help="Number of concurrent takers")
    sim.add_argument("--count", type=int, default=1, help="Tokens each worker takes")
    sim.add_argument("--prohibit-overflow", action="store_true", help="Reject requests above capacity")
    sim.set_defaults(func=cmd_simulate)

    show = sub.add_parser("show", help="Show a bucket from the configuration file")
    show.add_argument("name", nargs="?", default="default", help="rate_limits section name")
    show.add_argument("--all", action="store_true", help="Show every configured rate limit")
    show.set_defaults(func=cmd_show)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    if args.log_level:
        setup_logging(level=args.log_level)
    return args.func(args)
