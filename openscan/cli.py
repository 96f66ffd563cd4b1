#!/usr/bin/env python3
"""
OpenScan - Open Directory Scanner
Scans open directory listings recursively and reports what they contain.

WARNING: This tool is for authorized security research and testing only.
Only use on systems you own or have explicit permission to scan.
"""

import argparse
import signal
import sys
import threading

from tqdm import tqdm

from .config import DEFAULT_CONFIG_PATH, load_config
from .exceptions import ConfigError, ScanError
from .fetcher import HttpFetcher
from .listing import LinkExtractor
from .nsfw import NSFWDetector, ensure_model
from .report import render_text, save_report
from .scanner import Scanner


def build_parser():
    parser = argparse.ArgumentParser(
        prog='openscan',
        description="OpenScan - Open Directory Scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  openscan http://example.com/files/
  openscan http://example.com/files/ -d 5 -o report.md
  openscan http://example.com/files/ --no-nsfw -o report.json
  openscan https://example.com/files/ --no-verify-ssl --timeout 60

WARNING: This tool is for authorized security research only.
Only use on systems you own or have explicit permission to scan.
        """
    )

    parser.add_argument('url', help='URL of the directory listing to scan')
    parser.add_argument('-d', '--depth', type=int, default=None,
                        help='Maximum directory depth to scan (default: from config, 3)')
    parser.add_argument('-o', '--output',
                        help='Save the report to FILE (markdown, or JSON if FILE ends in .json)')
    parser.add_argument('-t', '--timeout', type=int, default=None,
                        help='Request timeout in seconds (default: from config, 30)')
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH,
                        help=f'Configuration file (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--delay', type=float, default=None,
                        help='Delay before each request in seconds (default: from config, 0)')
    parser.add_argument('--no-nsfw', action='store_true',
                        help='Skip NSFW classification of images')
    parser.add_argument('--update-model', action='store_true',
                        help='Check GitHub for a newer NSFW model before scanning')
    parser.add_argument('--no-verify-ssl', action='store_true',
                        help='Disable SSL certificate verification (use for self-signed certificates)')
    parser.add_argument('--user-agent', default=None,
                        help='Custom User-Agent string')
    parser.add_argument('--ignore-robots', action='store_true',
                        help='Ignore robots.txt restrictions')
    parser.add_argument('--no-progress', action='store_true',
                        help='Do not show the discovery progress bar')
    return parser


def install_signal_handlers(cancel_event):
    """Stop the scan gracefully on SIGINT/SIGTERM"""
    def signal_handler(signum, frame):
        print(f"\n[!] Received signal {signum}. Finishing with a partial report...")
        cancel_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def run(args):
    config = load_config(args.config)

    max_depth = args.depth if args.depth is not None else config.scanner.default_depth
    timeout = args.timeout if args.timeout is not None else config.scanner.default_timeout
    delay = args.delay if args.delay is not None else config.scanner.delay

    if max_depth < 0:
        print("[!] Error: depth must not be negative")
        return 1

    fetcher = HttpFetcher(
        timeout=timeout,
        verify_ssl=not args.no_verify_ssl,
        user_agent=args.user_agent,
        delay=delay,
    )

    if args.ignore_robots:
        print("[!] Ignoring robots.txt restrictions")
    elif not fetcher.robots_allows(args.url):
        print(f"[!] robots.txt disallows crawling {args.url} (use --ignore-robots to override)")
        return 1

    detector = None
    if not args.no_nsfw:
        model_path = ensure_model(config.model, fetcher, update=args.update_model)
        detector = NSFWDetector.from_model_file(model_path, config.thresholds, fetcher)

    cancel_event = threading.Event()
    install_signal_handlers(cancel_event)

    progress = None
    if not args.no_progress:
        progress = tqdm(
            total=None,
            desc="Discovering entries",
            unit="entries",
            leave=True,
            bar_format="{l_bar}{n_fmt} entries discovered [{elapsed}]"
        )

    scanner = Scanner(fetcher, LinkExtractor(), detector, cancel_event, progress)

    print(f"[+] Starting scan of {args.url} with max depth {max_depth}")
    try:
        report, records = scanner.scan(args.url, 0, max_depth)
    finally:
        if progress is not None:
            progress.close()

    print("\n[+] Scan complete!" if not cancel_event.is_set() else "\n[!] Scan interrupted, report is partial")
    print(f"[*] {len(records)} entries discovered")
    for problem in report.check_invariants():
        print(f"[!] Report inconsistency: {problem}")

    print(render_text(report))

    if args.output:
        save_report(report, args.output, config.report.include_nsfw_urls)
        print(f"\n[+] Report saved to: {args.output}")

    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate URL
    if not args.url.startswith(('http://', 'https://')):
        print("[!] Error: URL must start with http:// or https://")
        return 1

    try:
        return run(args)
    except KeyboardInterrupt:
        print("\n[!] Scan interrupted by user")
        return 1
    except ConfigError as e:
        print(f"[!] Configuration error: {e}")
        return 1
    except ScanError as e:
        print(f"[!] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
