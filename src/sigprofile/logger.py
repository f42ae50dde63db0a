"""
sigprofile structured logging - bracket-tagged progress lines for a profile run.

Answers three questions:
1. Which step is running?
2. Where did the profile come from (cache, remote, local)?
3. Did any dimension degrade?
"""

import sys
from datetime import UTC, datetime

from .models import BucketedAttribute

# Line buffering keeps interleaved stdout/stderr readable in pipes
try:
    sys.stdout.reconfigure(line_buffering=True)  # type: ignore
except Exception:
    pass  # Not reconfigurable (e.g. captured by a test runner)


def _print(*args: object, **kwargs: object) -> None:
    """Print with immediate flush."""
    print(*args, **kwargs, flush=True)


def _eprint(*args: object, **kwargs: object) -> None:
    """Print to stderr with immediate flush."""
    print(*args, **kwargs, file=sys.stderr, flush=True)


class ProgressLogger:
    """
    Progress logger for one profile computation.

    Quiet by default: per-scorer lines only appear in verbose mode,
    warnings and errors always go to stderr.
    """

    def __init__(self, run_id: str, verbose: bool = False, quiet: bool = False):
        self.run_id = run_id
        self.verbose = verbose
        self.quiet = quiet
        self.start_time = datetime.now(UTC)
        self.phase_times: dict[str, datetime] = {}
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def _out(self, line: str) -> None:
        if not self.quiet:
            _print(line)

    def elapsed(self) -> float:
        return (datetime.now(UTC) - self.start_time).total_seconds()

    def phase(self, name: str, detail: str = "") -> None:
        """Log a major step transition."""
        now = datetime.now(UTC)
        self.phase_times[name] = now
        elapsed = (now - self.start_time).total_seconds()

        if detail:
            self._out(f"[Phase] {name}: {detail} ({elapsed:.1f}s)")
        else:
            self._out(f"[Phase] {name} ({elapsed:.1f}s)")

    def scorer(self, name: str, attr: BucketedAttribute) -> None:
        """Log one assessed dimension (verbose only)."""
        if self.verbose:
            self._out(f"  [Scorer] {name}: {attr.bucket} ({attr.confidence}%)")

    def dropped(self, paths: list[str]) -> None:
        """Warn about signals discarded while parsing the bag."""
        if paths:
            shown = ", ".join(paths[:5])
            more = f" (+{len(paths) - 5} more)" if len(paths) > 5 else ""
            self.warning(f"Discarded {len(paths)} malformed signal(s): {shown}{more}")

    def cache_hit(self, key: str) -> None:
        self._out(f"[Cache] hit {key[:16]}")

    def remote(self, msg: str) -> None:
        self._out(f"[Remote] {msg}")

    def fallback(self, reason: str) -> None:
        """Log the switch from the remote analyzer to local scoring."""
        self._out(f"[Fallback] {reason}")

    def finish(self, overall_confidence: int, source: str = "local") -> None:
        """Log run completion."""
        elapsed = self.elapsed()
        minutes = int(elapsed // 60)
        seconds = elapsed % 60

        self._out(f"\n[sigprofile] Profile complete in {minutes}m{seconds:.1f}s")
        self._out(f"  Source: {source}")
        self._out(f"  Overall confidence: {overall_confidence}%")
        if self.warnings:
            self._out(f"  Warnings: {len(self.warnings)}")
        if self.errors:
            self._out(f"  Degraded dimensions: {len(self.errors)}")

    def error(self, msg: str) -> None:
        """Log an error."""
        self.errors.append(msg)
        _eprint(f"[Error] {msg}")

    def warning(self, msg: str) -> None:
        """Log a warning."""
        self.warnings.append(msg)
        _eprint(f"[Warning] {msg}")
