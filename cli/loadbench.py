"""
Command-line interface for the closed-loop and open-loop load benchmarks.
"""

import sys
import logging
import argparse
from typing import List, Optional

from algorithms.closed_loop import ClosedLoop
from algorithms.open_loop import OpenLoop
from common.errors import InvalidConfiguration
from common.report import render_report
from common.run_config import LoadMode, RunConfig
from common.target_factory import create_target_system
from configuration import (
    BASE_URL,
    DEFAULT_CONCURRENCY,
    DEFAULT_ENDPOINT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_IN_FLIGHT,
    DEFAULT_WORKLOAD_PER_WORKER,
    LOG_FORMAT,
    REQUEST_TIMEOUT_SECONDS,
)
from persistence.prom import SimplePrometheusExporter
from systems.endpoints import endpoint_help

logger = logging.getLogger(__name__)

SCHEDULERS = {
    LoadMode.CLOSED_LOOP: ClosedLoop,
    LoadMode.OPEN_LOOP: OpenLoop,
}

EPILOG = f"""
Endpoints:
{endpoint_help()}

Examples:
  # 10 workers x 100 requests each (the defaults)
  loadbench closed

  # 5 workers x 20 requests each against one resource
  loadbench closed 5 20 resource-get-by-id 1

  # 50 requests/second for 10 seconds
  loadbench open 50 10 order-post alice latte,mocha
"""


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--base-url', default=BASE_URL,
                        help=f'Base URL of the service under test (default: {BASE_URL})')
    parser.add_argument('--timeout', type=float, default=REQUEST_TIMEOUT_SECONDS,
                        help=f'Per-request timeout in seconds (default: {REQUEST_TIMEOUT_SECONDS:g})')
    parser.add_argument('--metrics-port', type=int, default=None,
                        help='Expose live Prometheus metrics on this port (default: disabled)')
    parser.add_argument('--log-level', default=DEFAULT_LOG_LEVEL,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help=f'Log level (default: {DEFAULT_LOG_LEVEL})')


def _add_closed_arguments(parser: argparse.ArgumentParser) -> None:
    _add_common_options(parser)
    parser.add_argument('concurrency', type=int, nargs='?', default=DEFAULT_CONCURRENCY,
                        help=f'Number of concurrent workers (default: {DEFAULT_CONCURRENCY})')
    parser.add_argument('workload_per_worker', type=int, nargs='?',
                        default=DEFAULT_WORKLOAD_PER_WORKER,
                        help=f'Requests per worker (default: {DEFAULT_WORKLOAD_PER_WORKER})')
    parser.add_argument('endpoint', nargs='?', default=DEFAULT_ENDPOINT,
                        help=f'Endpoint name (default: {DEFAULT_ENDPOINT})')
    parser.add_argument('params', nargs='*', help='Endpoint parameters')


def _add_open_arguments(parser: argparse.ArgumentParser) -> None:
    _add_common_options(parser)
    parser.add_argument('--max-in-flight', type=int, default=DEFAULT_MAX_IN_FLIGHT,
                        help=f'Upper bound on in-flight requests (default: {DEFAULT_MAX_IN_FLIGHT})')
    parser.add_argument('target_rate', type=int, nargs='?', help='Requests per second')
    parser.add_argument('duration', type=float, nargs='?', help='Duration in seconds')
    parser.add_argument('endpoint', nargs='?', default=DEFAULT_ENDPOINT,
                        help=f'Endpoint name (default: {DEFAULT_ENDPOINT})')
    parser.add_argument('params', nargs='*', help='Endpoint parameters')


def _configure_logging(level: str) -> None:
    # Only configure if the host application has not done so already
    if not logging.root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        logging.root.setLevel(level)


class LoadBenchCLI:
    """CLI for running one benchmark.

    With ``mode=None`` the parser takes a ``closed`` or ``open`` subcommand;
    with a mode it accepts that mode's positional arguments directly.
    """

    def __init__(self, mode: Optional[LoadMode] = None, prog: Optional[str] = None):
        self.mode = mode
        self.parser = self._create_parser(prog)

    def _create_parser(self, prog: Optional[str]) -> argparse.ArgumentParser:
        """Create the argument parser."""
        if self.mode is LoadMode.CLOSED_LOOP:
            parser = argparse.ArgumentParser(
                prog=prog,
                description='Closed-loop benchmark: fixed workers, fixed requests per worker',
                usage='%(prog)s [options] [concurrency] [workload_per_worker] [endpoint] [params ...]',
                formatter_class=argparse.RawDescriptionHelpFormatter,
                epilog=EPILOG,
            )
            _add_closed_arguments(parser)
            return parser

        if self.mode is LoadMode.OPEN_LOOP:
            parser = argparse.ArgumentParser(
                prog=prog,
                description='Open-loop benchmark: fixed request rate for a fixed duration',
                usage='%(prog)s [options] target_rate duration [endpoint] [params ...]',
                formatter_class=argparse.RawDescriptionHelpFormatter,
                epilog=EPILOG,
            )
            _add_open_arguments(parser)
            return parser

        parser = argparse.ArgumentParser(
            prog=prog,
            description='HTTP load benchmark',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=EPILOG,
        )
        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        closed_parser = subparsers.add_parser(
            'closed', help='Fixed workload per worker (closed loop)',
            usage='%(prog)s [options] [concurrency] [workload_per_worker] [endpoint] [params ...]',
        )
        _add_closed_arguments(closed_parser)

        open_parser = subparsers.add_parser(
            'open', help='Fixed request rate (open loop)',
            usage='%(prog)s [options] target_rate duration [endpoint] [params ...]',
        )
        _add_open_arguments(open_parser)
        self._open_parser = open_parser

        return parser

    def build_run_config(self, mode: LoadMode, args: argparse.Namespace) -> RunConfig:
        """Turn parsed arguments into a validated run configuration."""
        if mode is LoadMode.CLOSED_LOOP:
            return RunConfig.closed_loop(
                concurrency=args.concurrency,
                workload_per_worker=args.workload_per_worker,
                endpoint=args.endpoint,
                params=args.params,
            )
        return RunConfig.open_loop(
            target_rate=args.target_rate,
            duration_seconds=args.duration,
            endpoint=args.endpoint,
            params=args.params,
            max_in_flight=args.max_in_flight,
        )

    def run_benchmark(self, run_config: RunConfig, args: argparse.Namespace) -> int:
        """Run the benchmark and print the report."""
        print("=== Benchmark Configuration ===")
        print(f"Target: {args.base_url}")
        print(run_config.describe())
        print("===============================")
        sys.stdout.flush()

        exporter = None
        if args.metrics_port is not None:
            exporter = SimplePrometheusExporter(args.metrics_port)
            exporter.start_server()

        with create_target_system(run_config, args.base_url, args.timeout) as target_system:
            scheduler = SCHEDULERS[run_config.mode](run_config, target_system, exporter=exporter)
            report = scheduler.execute()
            logger.info(f"Established connections: {target_system.get_connection_count()}")

        print(render_report(report))
        return 0

    def run(self, args: Optional[List[str]] = None) -> int:
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)

        mode = self.mode
        if mode is None:
            if not parsed_args.command:
                self.parser.print_help()
                return 1
            mode = LoadMode.CLOSED_LOOP if parsed_args.command == 'closed' else LoadMode.OPEN_LOOP

        if mode is LoadMode.OPEN_LOOP and (
            parsed_args.target_rate is None or parsed_args.duration is None
        ):
            open_parser = self.parser if self.mode is not None else self._open_parser
            open_parser.print_help()
            return 1

        _configure_logging(parsed_args.log_level)

        try:
            run_config = self.build_run_config(mode, parsed_args)
            return self.run_benchmark(run_config, parsed_args)
        except InvalidConfiguration as e:
            logger.error(f"Invalid configuration: {e}")
            return 1
        except KeyboardInterrupt:
            logger.info("Operation interrupted by user")
            return 1


def main():
    """Entry point with ``closed`` / ``open`` subcommands."""
    sys.exit(LoadBenchCLI(prog='loadbench').run())


def closed_loop_main():
    """Entry point: <concurrency> <workload_per_worker> <endpoint> [params...]."""
    sys.exit(LoadBenchCLI(LoadMode.CLOSED_LOOP, prog='loadbench-closed').run())


def open_loop_main():
    """Entry point: <target_rate> <duration> <endpoint> [params...]."""
    sys.exit(LoadBenchCLI(LoadMode.OPEN_LOOP, prog='loadbench-open').run())


if __name__ == '__main__':
    main()
