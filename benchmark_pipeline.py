import time
import logging
from typing import Callable

from lemmastream import AnalysisContext, LemmatizerConfig, StemmerAnalyzer, SuffixLemmatizer

logger = logging.getLogger("benchmark")

SAMPLE_TEXT = (
    "The children were running through the fields while their parents watched. "
    "Visit www.example.com. or mail info@example.org for the U.S.A. schedule; "
    "AT&T reported 3.14% growth on 2009-10-19 and O'Reilly's books sold out. "
)


def time_calls(label: str, fn: Callable[[], int], rounds: int) -> float:
    start = time.perf_counter()
    token_count = 0
    for _ in range(rounds):
        token_count += fn()
    elapsed = time.perf_counter() - start
    print(f"{label:<28} {elapsed:.3f}s  ({token_count / max(elapsed, 1e-9):,.0f} tokens/s)")
    return elapsed


def run_benchmark(rounds: int = 2000):
    logger.info("Initializing analyzer benchmark...")

    analyzer = StemmerAnalyzer(
        {"body": LemmatizerConfig(SuffixLemmatizer(), return_original=True, return_oov_original=True)}
    )

    # 1. Sanity check: both paths must agree before timing them
    with AnalysisContext() as context:
        fresh = [t.as_tuple() for t in analyzer.analyze("body", SAMPLE_TEXT)]
        reused = [t.as_tuple() for t in analyzer.analyze("body", SAMPLE_TEXT, context)]
    if fresh != reused:
        raise SystemExit("Reused pipeline produced different tokens than a fresh one")

    # 2. Time fresh pipelines against a reused one
    print("\n" + "=" * 50)
    print(" " * 15 + "BENCHMARK RESULTS")
    print("=" * 50)
    for field_name in ("body", "title"):
        fresh_time = time_calls(
            f"{field_name}: fresh pipeline",
            lambda: sum(1 for _ in analyzer.analyze(field_name, SAMPLE_TEXT)),
            rounds,
        )
        with AnalysisContext() as context:
            reuse_time = time_calls(
                f"{field_name}: reused pipeline",
                lambda: sum(1 for _ in analyzer.analyze(field_name, SAMPLE_TEXT, context)),
                rounds,
            )
        print(f"{field_name}: reuse speedup         {fresh_time / max(reuse_time, 1e-9):.2f}x")
    print("=" * 50)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    run_benchmark()
