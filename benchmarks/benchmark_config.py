import argparse
import json
import os
import statistics
import sys
import timeit
from typing import Any, Callable, Dict, List, Optional

from indent_config.config import Config

# --- Default Configuration ---
DEFAULT_ITERATIONS = 100
DEFAULT_REPEAT = 5
DEFAULT_DATA_FILES = [
    "indent_config/tests/data/server.yml",
    "indent_config/tests/data/nested_4space.yml",
    "indent_config/tests/data/sections.yml",
]


class Statistics:
    """A container for statistical measurements of benchmark timings.

    Attributes:
        mean_s: The mean (average) time in seconds.
        median_s: The median time in seconds.
        stdev_s: The standard deviation in seconds.
        min_s: The minimum time in seconds.
        max_s: The maximum time in seconds.
    """
    def __init__(self, times_s: List[float]):
        self.mean_s = statistics.mean(times_s)
        self.median_s = statistics.median(times_s)
        self.stdev_s = statistics.stdev(times_s) if len(times_s) > 1 else 0.0
        self.min_s = min(times_s)
        self.max_s = max(times_s)

    def to_dict(self) -> Dict[str, float]:
        """Converts the statistics to a dictionary with times in milliseconds."""
        return {
            "mean_ms": self.mean_s * 1000,
            "median_ms": self.median_s * 1000,
            "stdev_ms": self.stdev_s * 1000,
            "min_ms": self.min_s * 1000,
            "max_ms": self.max_s * 1000,
        }


class BenchmarkResult:
    """Stores the load, save and lookup timings for a single file.

    Attributes:
        file_path: The path to the config file that was benchmarked.
        iterations: The number of iterations per benchmark repetition.
        repetitions: The number of times the benchmark was repeated.
        key_count: Number of keys in the file's flat index.
        stats: Mapping from operation name ("load", "save", "lookup") to its
            `Statistics`.
    """
    def __init__(self, file_path: str, iterations: int, repetitions: int):
        self.file_path = file_path
        self.iterations = iterations
        self.repetitions = repetitions
        self.key_count = 0
        self.stats: Dict[str, Statistics] = {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": os.path.basename(self.file_path),
            "iterations": self.iterations,
            "repetitions": self.repetitions,
            "keys": self.key_count,
            **{name: stats.to_dict() for name, stats in self.stats.items()},
        }


class BenchmarkRunner:
    """Orchestrates the execution of the benchmark suite.

    Attributes:
        data_files: A list of paths to the config files to be benchmarked.
        iterations: The number of iterations for each benchmark repetition.
        repeat: The number of times to repeat each benchmark.
        results: A list of `BenchmarkResult` objects, populated after `run()`
                 is called.
    """
    def __init__(self, data_files: List[str], iterations: int, repeat: int):
        self.data_files = data_files
        self.iterations = iterations
        self.repeat = repeat
        self.results: List[BenchmarkResult] = []

    def _run_benchmark(self, func: Callable[[], Any]) -> Statistics:
        """Times `func` with `timeit` and returns per-iteration statistics."""
        timer = timeit.Timer(func)
        times = timer.repeat(repeat=self.repeat, number=self.iterations)
        times_per_iteration = [t / self.iterations for t in times]
        return Statistics(times_per_iteration)

    def run(self):
        """Runs the load, save and lookup benchmarks for every data file."""
        for file_path in self.data_files:
            result = BenchmarkResult(file_path, self.iterations, self.repeat)
            raw_content = load_test_data(file_path)

            scratch = Config()
            result.stats["load"] = self._run_benchmark(lambda: scratch.load_from_text(raw_content))

            config = Config()
            config.load_from_text(raw_content)
            keys = config.keys()
            result.key_count = len(keys)
            result.stats["save"] = self._run_benchmark(config.save_to_text)
            result.stats["lookup"] = self._run_benchmark(lambda: [config.get(key) for key in keys])

            self.results.append(result)

    def print_results_human_readable(self):
        """Prints the benchmark results in a human-readable table."""
        print("--- Config Parser Benchmark ---")
        print(f"Iterations per repetition: {self.iterations}")
        print(f"Repetitions: {self.repeat}")

        for result in self.results:
            print("\n" + "=" * 80)
            print(f"Benchmark for: {os.path.basename(result.file_path)} ({result.key_count} keys)")
            print("=" * 80)

            for name, stats in result.stats.items():
                values = stats.to_dict()
                print(f"\n{name.capitalize()} Performance:")
                print(f"  Mean:   {values['mean_ms']:.4f} ms")
                print(f"  Median: {values['median_ms']:.4f} ms")
                print(f"  Stdev:  {values['stdev_ms']:.4f} ms")
                print(f"  Min:    {values['min_ms']:.4f} ms (Best)")
                print(f"  Max:    {values['max_ms']:.4f} ms (Worst)")
            print("-" * 80)

        print("\n--- Benchmark Complete ---")

    def print_results_json(self):
        """Prints the benchmark results in JSON format."""
        output_data = {
            "configuration": {
                "iterations": self.iterations,
                "repetitions": self.repeat,
                "data_files": self.data_files
            },
            "results": [res.to_dict() for res in self.results]
        }
        print(json.dumps(output_data, indent=2))


def load_test_data(file_path: str) -> str:
    """Loads content from a specified data file."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        print(f"Error: Data file not found at '{file_path}'.", file=sys.stderr)
        print("Please ensure the path is correct and the script is run from the repository's root directory.", file=sys.stderr)
        sys.exit(1)
    except IOError as e:
        print(f"Error reading file '{file_path}': {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[List[str]] = None):
    """Parses command-line arguments and runs the benchmarks."""
    parser = argparse.ArgumentParser(
        description="Run benchmarks for the indent_config parser and serializer.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('--data-files', nargs='+', default=DEFAULT_DATA_FILES,
                        help="Paths to the config files to use for benchmarking.")
    parser.add_argument('--iterations', type=int, default=DEFAULT_ITERATIONS,
                        help="Number of times to run the operation within each benchmark repetition.")
    parser.add_argument('--repeat', type=int, default=DEFAULT_REPEAT,
                        help="Number of times to repeat the benchmark.")
    parser.add_argument('--output-json', action='store_true',
                        help="Output the results in JSON format instead of a human-readable table.")
    args = parser.parse_args(argv)

    runner = BenchmarkRunner(data_files=args.data_files, iterations=args.iterations, repeat=args.repeat)
    runner.run()

    if args.output_json:
        runner.print_results_json()
    else:
        runner.print_results_human_readable()


if __name__ == "__main__":
    main()
