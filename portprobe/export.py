"""
CSV export of scan results.
"""
from __future__ import annotations
import csv
import logging
import os
from typing import Iterable, Optional

from .models import PortResult

CSV_HEADER = ("Port", "TCP", "UDP")


def csv_filename(target: str) -> str:
    """Builds the default file name, e.g. PortsTo192-168-1-1.csv."""
    safe = target.strip().replace('.', '-').replace(':', '-').replace('%', '-')
    return f"PortsTo{safe}.csv"


def write_csv(results: Iterable[PortResult], path: str) -> None:
    """Writes one Port,TCP,UDP row per result, in collection order."""
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f, lineterminator='\n')
        writer.writerow(CSV_HEADER)
        for r in results:
            writer.writerow([r.port, r.tcp_status, r.udp_status])


def export_results(results: Iterable[PortResult], target: str, directory: Optional[str] = None) -> str:
    """Exports the full result collection and returns the absolute file path."""
    directory = directory or os.getcwd()
    os.makedirs(directory, exist_ok=True)
    path = os.path.abspath(os.path.join(directory, csv_filename(target)))
    write_csv(results, path)
    logging.info(f"Results exported to {path}")
    return path
