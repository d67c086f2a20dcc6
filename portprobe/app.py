"""
Command-line application for portprobe.

Loads the configuration, collects the target and port selection (from
arguments or interactive prompts), runs the scan and hands the results to
the console pager or the CSV exporter.
"""
from __future__ import annotations
import argparse
import logging
from typing import Any, Callable, Dict, List, Optional

from . import configuration
from .engine import ProbeEngine
from .errors import ScanError
from .export import export_results, write_csv
from .localization import get_translator
from .models import PortResult, ScanSelection
from .parsing import PRESETS, get_preset, parse_port_list, parse_port_range, validate_host
from .ui.console import ConsoleUI
from .ui.view import ViewState

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

EXIT_OK = 0
EXIT_EXPORT_ERROR = 1
EXIT_SCAN_ERROR = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="portprobe", description="Check which TCP and UDP ports of a host respond.")
    p.add_argument("target", nargs="?", help="IPv4/IPv6 address or hostname (prompted for if omitted)")
    selection = p.add_mutually_exclusive_group()
    selection.add_argument("--preset", choices=[preset.key for preset in PRESETS], help="Scan a named port range")
    selection.add_argument("--range", dest="port_range", metavar="START-END", help="Scan an inclusive port range, e.g. 1-1024")
    selection.add_argument("--ports", help="Scan specific ports in the given order, e.g. 22,80,443")
    p.add_argument("--all", action="store_true", help="Show closed ports too")
    p.add_argument("--csv", nargs="?", const="", metavar="PATH", help="Save results as CSV (default name if PATH omitted)")
    p.add_argument("--no-pager", action="store_true", help="Print the results once instead of paging")
    p.add_argument("--timeout", type=float, help="Per-probe timeout in seconds (default from config: 1)")
    p.add_argument("--workers", type=int, help="Maximum concurrent probes (default from config: 512)")
    p.add_argument("--config", help="Path to the YAML config file (default: portprobe.yaml)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return p


def selection_from_args(args: argparse.Namespace) -> Optional[ScanSelection]:
    """Returns the selection given on the command line, or None to prompt."""
    if args.preset:
        preset = get_preset(args.preset)
        return ScanSelection(start=preset.start, end=preset.end)
    if args.port_range:
        start, end = parse_port_range(args.port_range)
        return ScanSelection(start=start, end=end)
    if args.ports:
        return ScanSelection(ports=parse_port_list(args.ports))
    return None


def engine_from_config(
    config: Dict[str, Any],
    timeout: Optional[float] = None,
    workers: Optional[int] = None,
) -> ProbeEngine:
    return ProbeEngine(
        timeout=timeout if timeout is not None else float(config['probe_timeout_seconds']),
        max_workers=workers if workers is not None else int(config['max_workers']),
        udp_payload=str(config['udp_payload']).encode('utf-8'),
    )


def run_scan(
    engine: ProbeEngine,
    target: str,
    selection: ScanSelection,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[PortResult]:
    if selection.is_range:
        return engine.scan_range(target, selection.start, selection.end, on_progress)
    return engine.scan_ports(target, selection.ports or [], on_progress)


def _configure_logging(config: Dict[str, Any], verbose: bool):
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, str(config.get('log_level', 'WARNING')).upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    """The main entry point for the application."""
    args = build_parser().parse_args(argv)
    config = configuration.load_or_create_config(args.config)
    _configure_logging(config, args.verbose)
    logging.info("Application starting up.")

    _ = get_translator(config.get('language'))
    ui = ConsoleUI(_)

    try:
        target = validate_host(args.target or ui.ask_target())
        selection = selection_from_args(args) or ui.choose_selection()
        engine = engine_from_config(config, timeout=args.timeout, workers=args.workers)
        ui.console.print(f"\n{_('Scanning ports...')} [dim]({selection.describe()})[/dim]")
        with ui.progress(_("Probing")) as on_progress:
            results = run_scan(engine, target, selection, on_progress)
    except ScanError as e:
        ui.error(str(e))
        return EXIT_SCAN_ERROR
    except ValueError as e:
        # --timeout/--workers values the engine refuses
        ui.error(str(e))
        return EXIT_SCAN_ERROR
    except KeyboardInterrupt:
        ui.console.print(f"\n{_('Scan aborted.')}")
        return EXIT_INTERRUPTED

    ui.console.print(_("Scan complete!"))
    show_all = args.all or bool(config.get('show_all_by_default'))
    export_directory = config.get('export_directory') or None

    exit_code = EXIT_OK
    if args.csv is not None:
        try:
            if args.csv:
                write_csv(results, args.csv)
                path = args.csv
            else:
                path = export_results(results, target, export_directory)
            ui.console.print(_("Results exported to {path}").format(path=path))
        except OSError as e:
            # The results are still printed below
            ui.error(_("Could not save results: {error}").format(error=e))
            exit_code = EXIT_EXPORT_ERROR

    if args.no_pager or args.csv is not None or not ui.console.is_terminal:
        ui.print_results(results, target, show_all=show_all)
    else:
        state = ViewState(show_all=show_all, page_size=ui.page_size(int(config.get('page_size', 0))))
        try:
            ui.page_results(results, target, state, export_directory)
        except (KeyboardInterrupt, EOFError):
            pass
    return exit_code
