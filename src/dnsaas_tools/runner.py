import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence


class ToolNotFound(FileNotFoundError):
    """The executable of a command is not on PATH."""


@dataclass(frozen=True)
class CommandResult:
    cmd: List[str]
    output: str
    returncode: Optional[int] = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0


class CommandRunner:
    """Small wrapper around subprocess.run with timeouts and consistent output."""

    def __init__(self, timeout_seconds: Optional[float] = 20):
        self.timeout_seconds = None if timeout_seconds is None else float(timeout_seconds)

    def run(self, cmd: Sequence[str], timeout_seconds: Optional[float] = None) -> CommandResult:
        cmd_list = list(cmd)
        t = self.timeout_seconds if timeout_seconds is None else float(timeout_seconds)
        try:
            p = subprocess.run(cmd_list, capture_output=True, text=True, timeout=t)
            out = ((p.stdout or "") + "\n" + (p.stderr or "")).strip()
            return CommandResult(cmd=cmd_list, output=out, returncode=p.returncode)
        except FileNotFoundError as e:
            raise ToolNotFound(f"{cmd_list[0]}: command not found") from e
        except subprocess.TimeoutExpired:
            return CommandResult(cmd=cmd_list, output=f"[timeout after {t}s] {' '.join(cmd_list)}", timed_out=True)

    def dig(self, args: Sequence[str], timeout_seconds: Optional[float] = None) -> CommandResult:
        return self.run(["dig", *list(args)], timeout_seconds=timeout_seconds)
