from __future__ import annotations

import logging
import os
import shlex
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from dnsaas_tools.runner import CommandResult, CommandRunner

from .report import StressReport, summarize

log = logging.getLogger(__name__)

# Seconds to let parallel-nuke'd flame processes die before truncating results.
SETTLE_SECONDS = 5.0


def count_hosts(hosts_file: str) -> int:
    """Count lines that are neither empty nor start with "#"; whitespace-only and indented comment lines count."""
    n = 0
    with open(hosts_file, encoding="utf-8") as fh:
        for line in fh:
            s = line.rstrip("\r\n")
            if s and not s.startswith("#"):
                n += 1
    return n


@dataclass
class StressTestConfig:
    queries_file: str
    hosts_file: str = "hosts.txt"
    global_options: Optional[str] = None  # default: "-t 0 -h <hosts_file>"
    rsync_options: str = "-a"
    out_dir: str = os.path.join(os.getcwd(), "out")
    results_file: str = "/tmp/flame_metrics.json"
    duration: str = "30m"
    requests_per_host: int = 3000
    no_clean: bool = False

    @property
    def pssh_options(self) -> List[str]:
        opts = self.global_options if self.global_options is not None else f"-t 0 -h {self.hosts_file}"
        return shlex.split(opts)

    @property
    def remote_queries_file(self) -> str:
        return "/tmp/" + os.path.basename(self.queries_file)


class StressTest:
    """
    Runs flame on every host in hosts_file at the same time and collects the results.

    Steps (a failing step is logged and the test goes on, like the shell version did):
      1) copy the queries file to every host (parallel-rsync)
      2) kill leftovers of a previous run (parallel-nuke flame)
      3) truncate the remote results file
      4) run flame for <duration> at <requests_per_host> QPS per host
      5) fetch the last result line per host into out_dir (parallel-ssh -o)
      6) remove remote temporary files unless no_clean
      7) summarize out_dir
    """

    def __init__(
        self,
        config: StressTestConfig,
        runner: Optional[CommandRunner] = None,
        sleep: Callable[[float], None] = time.sleep,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.config = config
        # flame runs for the whole test duration; remote `timeout` bounds it, not us.
        self.runner = runner or CommandRunner(timeout_seconds=None)
        self.sleep = sleep
        self.echo = echo

    def commands(self) -> List[List[str]]:
        """All remote commands of a run, in order (without the settle pause)."""
        c = self.config
        g = c.pssh_options
        remote_q = c.remote_queries_file
        flame = (
            f"timeout --preserve-status {c.duration} flame -Q {int(c.requests_per_host)} -F inet "
            f"-f {remote_q} -v 0 -o {c.results_file} $(hostname -i)"
        )

        cmds = [
            ["parallel-rsync", *g, *shlex.split(c.rsync_options), "--", c.queries_file, remote_q],
            ["parallel-nuke", *g, "--", "flame"],
            ["parallel-ssh", *g, "--", f"cat /dev/null > {c.results_file}"],
            ["parallel-ssh", *g, "--", flame],
            ["parallel-ssh", *g, "-o", c.out_dir, "--", f"tail -1 {c.results_file} | jq .total_responses"],
        ]
        if not c.no_clean:
            cmds.append(["parallel-ssh", *g, "--", f"rm -f {remote_q} {c.results_file}"])
        return cmds

    def run(self) -> StressReport:
        c = self.config
        Path(c.out_dir).mkdir(parents=True, exist_ok=True)
        cmds = self.commands()

        self.echo("Sync queries file...")
        self._step(cmds[0])

        self.echo("Kill running tests (maybe failed)...")
        self._step(cmds[1])
        self.sleep(SETTLE_SECONDS)

        self.echo("Truncate file with results...")
        self._step(cmds[2])

        self.echo(f"Run test with {c.requests_per_host} RPS per host on {c.duration}...")
        self._step(cmds[3])

        self.echo("Get test results...")
        self._step(cmds[4])

        if not c.no_clean:
            self.echo("Remove temporary files...")
            self._step(cmds[5])

        return summarize(c.out_dir)

    def _step(self, cmd: List[str]) -> CommandResult:
        log.debug("running: %s", shlex.join(cmd))
        res = self.runner.run(cmd)
        if res.output:
            self.echo(res.output)
        if not res.ok:
            log.warning("%s failed (rc=%s, timed_out=%s)", cmd[0], res.returncode, res.timed_out)
        return res
