"""
Export Folders — One directory per export run, named after its query.

  {OUTPUT_DIR}/20240301_1430_Shopify_Orders_open_20240301-20240331/
      orders_export.csv      the flattened order rows
      export_results.json    run metadata (query, counts, pages, errors)

An open-ended range uses "start" / "now" in place of the missing date.

Expired runs (older than OUTPUT_RETENTION_DAYS, judged by the stamp at the
front of the folder name) are pruned before a new export starts. Only folders
carrying the export label are touched; retention_days=0 keeps everything.
"""

import os
import shutil
from datetime import datetime, timedelta
from typing import List, Optional

from .models import OrderQuery
from .settings import EXPORT_LABEL

STAMP_FORMAT = "%Y%m%d_%H%M"
RESULTS_FILENAME = "export_results.json"
_STAMP_LENGTH = len("20240301_1430")


def _range_label(query: OrderQuery) -> str:
    start = query.start_date.strftime("%Y%m%d") if query.start_date else "start"
    end = query.end_date.strftime("%Y%m%d") if query.end_date else "now"
    return f"{start}-{end}"


class ExportFolders:
    """Export run folders under one output directory.

    Attributes:
        base_dir: Root output directory.
        csv_filename: Name of the CSV inside each run folder.
        retention_days: Prune runs older than this many days (0 = keep forever).
        started: Run time used for the folder stamp and the retention cutoff.
        run_dir: Folder of the current export (None until open_run()).
    """

    def __init__(self, base_dir: str, csv_filename: str, retention_days: int = 30,
                 now: Optional[datetime] = None):
        self.base_dir = base_dir
        self.csv_filename = csv_filename
        self.retention_days = retention_days
        self.started = now or datetime.now()
        self.run_dir = None

    def folder_name(self, query: OrderQuery) -> str:
        stamp = self.started.strftime(STAMP_FORMAT)
        return f"{stamp}_{EXPORT_LABEL}_{query.status}_{_range_label(query)}"

    def open_run(self, query: OrderQuery) -> str:
        """Create the folder for this query's export and return its path."""
        path = os.path.join(self.base_dir, self.folder_name(query))
        os.makedirs(path, exist_ok=True)
        self.run_dir = path
        return path

    @property
    def csv_path(self) -> str:
        return self._path(self.csv_filename)

    @property
    def results_path(self) -> str:
        return self._path(RESULTS_FILENAME)

    def _path(self, filename: str) -> str:
        if self.run_dir is None:
            raise RuntimeError("No export folder open. Call open_run() first.")
        return os.path.join(self.run_dir, filename)

    def _run_time(self, name: str) -> Optional[datetime]:
        if f"_{EXPORT_LABEL}_" not in name:
            return None
        try:
            return datetime.strptime(name[:_STAMP_LENGTH], STAMP_FORMAT)
        except ValueError:
            return None

    def prune(self, debug: bool = False) -> List[str]:
        """Delete expired export folders.

        Returns:
            Names of the folders removed, oldest first.
        """
        if self.retention_days <= 0 or not os.path.isdir(self.base_dir):
            return []

        cutoff = self.started - timedelta(days=self.retention_days)
        removed = []
        for name in sorted(os.listdir(self.base_dir)):
            path = os.path.join(self.base_dir, name)
            run_time = self._run_time(name)
            if run_time is None or run_time >= cutoff or not os.path.isdir(path):
                continue
            try:
                shutil.rmtree(path)
            except OSError as e:
                print(f"  WARNING: Could not remove {name}: {e}")
                continue
            removed.append(name)
            if debug:
                print(f"  Removed expired export: {name}")
        return removed
