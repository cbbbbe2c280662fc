# Summary of a load test: per-host and total response codes as reported by flame.
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

log = logging.getLogger(__name__)

RCODES = ["NOERROR", "NXDOMAIN", "SERVFAIL"]
COLUMNS = ["host", *RCODES, "total"]


def _percent(count: pd.Series, total: pd.Series) -> pd.Series:
    # Truncated to two decimals (bc scale=2), 0.00 when a host answered nothing.
    return (count * 10000 // total.clip(lower=1)) / 100


@dataclass
class StressReport:
    per_host: pd.DataFrame
    totals: Dict[str, Any]

    @property
    def hosts(self) -> int:
        return len(self.per_host)


def summarize(out_dir: Union[str, Path]) -> StressReport:
    """
    Read one flame `.total_responses` JSON object per host file in out_dir.

    Missing rcode keys count as 0. Files that are not a JSON object (a host that
    failed, jq printing `null`) are skipped with a warning.
    """
    rows: List[Dict[str, Any]] = []
    for path in sorted(Path(out_dir).iterdir()):
        if not path.is_file():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "null")
        except (OSError, ValueError) as e:
            log.warning("skipping %s: %s", path.name, e)
            continue
        if not isinstance(data, dict):
            log.warning("skipping %s: no response counters", path.name)
            continue

        row: Dict[str, Any] = {"host": path.name}
        for rc in RCODES:
            try:
                row[rc] = int(data.get(rc) or 0)
            except (TypeError, ValueError):
                row[rc] = 0
        rows.append(row)

    df = pd.DataFrame(rows, columns=["host", *RCODES])
    for rc in RCODES:
        df[rc] = df[rc].astype("int64")
    df["total"] = df[RCODES].sum(axis=1).astype("int64")
    for rc in RCODES:
        df[f"{rc}_pct"] = _percent(df[rc], df["total"])

    sums = df[RCODES].sum()
    totals: Dict[str, Any] = {rc: int(sums[rc]) for rc in RCODES}
    totals["total"] = sum(totals[rc] for rc in RCODES)
    for rc in RCODES:
        totals[f"{rc}_pct"] = (totals[rc] * 10000 // max(totals["total"], 1)) / 100

    return StressReport(per_host=df.reset_index(drop=True), totals=totals)


def _table(counts: Dict[str, Any]) -> List[str]:
    return [f"  {rc + ':':<10} {counts[rc]:>10}  {counts[rc + '_pct']:.2f}%" for rc in RCODES]


def format_report(report: StressReport, hosts: int | None = None) -> str:
    lines: List[str] = []
    for row in report.per_host.to_dict(orient="records"):
        lines.append(f"Responses from {row['host']}:")
        lines.extend(_table(row))

    n = report.hosts if hosts is None else hosts
    lines.append(f"Responses TOTAL (from {n} hosts):")
    lines.extend(_table(report.totals))
    return "\n".join(lines)
