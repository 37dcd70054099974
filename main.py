#!/usr/bin/env python3
"""
CLI application for sending line data to Wavefront through direct ingestion.

Either sends the points of a line data file immediately (--input), or runs
collection rounds of the system collector and lets the client flush them in
the background.
"""
import argparse
import json
import logging
import os
import sys
import time
from typing import Any, Dict, List, Optional

import requests

from collectors.system_collector import SystemCollector
from direct_ingestion import DataType, DirectClient
from direct_ingestion import config as client_config

# Setup logging
logger = logging.getLogger(__name__)

# Applied after the config file is merged, so file values win over these
DEFAULTS = {
    'server_url': client_config.SERVER_URL,
    'token': client_config.TOKEN,
    'max_queue_size': client_config.MAX_QUEUE_SIZE,
    'batch_size': client_config.BATCH_SIZE,
    'flush_interval': client_config.FLUSH_INTERVAL,
    'request_timeout': client_config.REQUEST_TIMEOUT,
    'max_retries': client_config.MAX_RETRIES,
    'retry_delay': client_config.RETRY_DELAY,
    'source': client_config.DEFAULT_SOURCE,
    'interval': 60,
    'count': 0,
    'data_type': 'metric',
}

DATA_TYPE_CHOICES = {
    'metric': DataType.METRIC,
    'histogram': DataType.HISTOGRAM,
    'span': DataType.SPAN,
}


def setup_logging(log_level: str) -> None:
    """
    Setup logging with the specified log level.

    Args:
        log_level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def load_config_from_file(config_file: str) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    Args:
        config_file (str): Path to the JSON config file

    Returns:
        dict: Configuration dictionary with argument names as keys
    """
    if not os.path.exists(config_file):
        logger.error("Config file not found: %s", config_file)
        return {}

    try:
        with open(config_file, 'r') as f:
            config = json.load(f)
            logger.debug("Loaded configuration from %s: %s", config_file, config)
            return config
    except (json.JSONDecodeError, ValueError) as e:
        logger.error("Error parsing config file %s: %s", config_file, e)
        return {}


def merge_config_with_args(config: Dict[str, Any], args: argparse.Namespace) -> argparse.Namespace:
    """
    Merge configuration from a file with command line arguments.
    Command line arguments take precedence over config file values,
    and built-in defaults fill whatever is still unset.

    Args:
        config (dict): Configuration dictionary from file
        args (argparse.Namespace): Command line arguments

    Returns:
        argparse.Namespace: Updated arguments namespace
    """
    args_dict = vars(args).copy()

    for key, value in config.items():
        # Convert dashes to underscores in key names
        arg_key = key.replace('-', '_')
        if args_dict.get(arg_key) is None:
            args_dict[arg_key] = value

    for key, value in DEFAULTS.items():
        if args_dict.get(key) is None:
            args_dict[key] = value

    return argparse.Namespace(**args_dict)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Send line data to Wavefront through the direct ingestion API.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument('--config-file', type=str,
                        help='Path to JSON configuration file')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Log level')
    parser.add_argument('--dry-run', action='store_true',
                        help='Do not send anything, just log the points')

    # Client configuration
    parser.add_argument('--server-url', type=str,
                        help='Wavefront server address')
    parser.add_argument('--token', type=str,
                        help='Token with direct data ingestion permission')
    parser.add_argument('--max-queue-size', type=int,
                        help='Size of the buffer for each data type')
    parser.add_argument('--batch-size', type=int,
                        help='Number of points sent by one request')
    parser.add_argument('--flush-interval', type=float,
                        help='Seconds between background flushes')
    parser.add_argument('--request-timeout', type=float,
                        help='Request timeout in seconds')
    parser.add_argument('--max-retries', type=int,
                        help='Total attempts on connection errors')
    parser.add_argument('--retry-delay', type=float,
                        help='Delay between attempts in seconds')
    parser.add_argument('--source', type=str,
                        help='Source reported with collected metrics')

    # File mode
    parser.add_argument('--input', type=str,
                        help='Line data file to send immediately, one point per line')
    parser.add_argument('--data-type', type=str, choices=sorted(DATA_TYPE_CHOICES),
                        help='Data type of the points in --input (default: metric)')

    # Collection mode
    parser.add_argument('--interval', type=int,
                        help='Interval between collections in seconds (default: 60)')
    parser.add_argument('--count', type=int,
                        help='Number of collection rounds, 0 for infinite (default: 0)')

    return parser


def create_client(args: argparse.Namespace) -> DirectClient:
    """
    Create a direct client from command line arguments.

    Args:
        args (argparse.Namespace): Merged arguments
    """
    return DirectClient(
        args.server_url,
        args.token,
        max_queue_size=args.max_queue_size,
        batch_size=args.batch_size,
        flush_interval=args.flush_interval,
        request_timeout=args.request_timeout,
        max_retries=args.max_retries,
        retry_delay=args.retry_delay,
        default_source=args.source
    )


def read_line_data(path: str) -> List[str]:
    """Read the non-empty lines of a line data file."""
    with open(path, 'r', encoding='utf-8') as f:
        return [line.rstrip('\r\n') for line in f if line.strip()]


def send_file(client: DirectClient, path: str, data_type: DataType) -> int:
    """
    Send every point of a line data file immediately.

    Returns:
        int: 0 if every batch was accepted, 1 otherwise
    """
    points = read_line_data(path)
    send_now = {
        DataType.METRIC: client.send_metrics_now,
        DataType.HISTOGRAM: client.send_histograms_now,
        DataType.SPAN: client.send_spans_now,
    }[data_type]

    try:
        results = send_now(points)
    except requests.exceptions.RequestException as e:
        logger.error("Could not reach %s: %s", client.server, e)
        return 1

    rejected = sum(1 for result in results if not result.ok)
    if rejected:
        logger.error("%s of %s batches were rejected", rejected, len(results))
        return 1

    logger.info("Sent %s %s points in %s batches", len(points), data_type.name.lower(), len(results))
    return 0


def run_collection(client: Optional[DirectClient], collector: SystemCollector, interval: int, count: int,
                   dry_run: bool = False) -> int:
    """
    Run collection rounds, buffering the points on the client.

    Returns:
        int: Number of rounds completed
    """
    round_count = 0
    next_collection_time = time.time()
    try:
        while count == 0 or round_count < count:
            round_count += 1
            logger.info("Collection round %s%s", round_count,
                        ("/%s" % count if count > 0 else ""))

            collector.collect_and_send(client, dry_run=dry_run)

            if count == 0 or round_count < count:
                next_collection_time += interval
                wait_time = next_collection_time - time.time()

                if wait_time > 0:
                    logger.debug("Waiting %.2f seconds until next collection...", wait_time)
                    time.sleep(wait_time)
                else:
                    logger.warning("Collection took longer than interval. Next collection will start immediately.")
                    next_collection_time = time.time()
    except KeyboardInterrupt:
        logger.info("Collection interrupted by user.")

    return round_count


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to parse arguments and send the points."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    config = {}
    if args.config_file:
        logger.info("Loading configuration from %s", args.config_file)
        config = load_config_from_file(args.config_file)
    args = merge_config_with_args(config, args)

    data_type = DATA_TYPE_CHOICES[args.data_type]

    if args.dry_run:
        if args.input:
            points = read_line_data(args.input)
            logger.info("DRY RUN: Would send %s %s points", len(points), data_type.name.lower())
        else:
            run_collection(None, SystemCollector(source=args.source), args.interval, args.count, dry_run=True)
        return 0

    try:
        client = create_client(args)
    except ValueError as e:
        parser.error(str(e))

    with client:
        if args.input:
            return send_file(client, args.input, data_type)

        run_collection(client, SystemCollector(source=args.source), args.interval, args.count)
        logger.info("There are %s points left to flush.", client.get_buffered_count())

    logger.info("Collection completed. %s reports failed.", client.get_failure_count())
    return 0


if __name__ == "__main__":
    sys.exit(main())
