"""Mutation testing analysis.

Reads ``mutmut`` (3.x) results and maps surviving mutants back to the
file and function they live in, so each survivor points at a missing
test scenario.

Workflow::

    pip install mutmut
    mutmut run
    python -m validation.mutation_analysis

``mutmut results --all true`` prints one ``<mutant id>: <status>`` line
per mutant, e.g. ``keypad.x_press__mutmut_3: survived``.  The goal:
every mutant should be *killed* by at least one test.
"""
from __future__ import annotations

import logging
import re
import subprocess
import sys
from collections import Counter
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

MUTATED_PATHS = ("calculator.py", "keypad.py")

# "    calculator.x_apply__mutmut_12: survived"
_RESULT_LINE = re.compile(r"^\s*(?P<id>[\w.]+__mutmut_\d+):\s*(?P<status>[a-z][a-z ]*?)\s*$")
# "x_apply" -> "apply";  "xǁKeypadǁpress" style ids keep their class part
_MUTANT_NAME = re.compile(r"^(?P<module>[\w.]+?)\.x_?(?P<func>\w+?)__mutmut_\d+$")


@dataclass
class Mutant:
    id: str
    status: str          # killed | survived | timeout | suspicious | ...
    source_file: str
    function: str


@dataclass
class MutationReport:
    counts: Counter = field(default_factory=Counter)
    survivors: list[Mutant] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def killed(self) -> int:
        return self.counts["killed"]

    @property
    def survived(self) -> int:
        return self.counts["survived"]

    @property
    def score(self) -> float:
        if self.total == 0:
            return 0.0
        return self.killed / self.total

    def summary(self) -> str:
        lines = [
            "Mutation Testing Report",
            "=" * 40,
            f"Total mutants:   {self.total}",
        ]
        for status, count in sorted(self.counts.items()):
            lines.append(f"{status.capitalize() + ':':<17}{count}")
        lines.append(f"Mutation score:  {self.score:.1%}")

        if self.survivors:
            lines.append("")
            lines.append("Surviving mutants (test gaps):")
            for m in self.survivors:
                lines.append(f"  [{m.id}] {m.source_file}: {m.function}()")
                lines.append("       -> Add a test that detects this mutation")
        elif self.total:
            lines.append("\nAll mutants killed, test suite is thorough.")
        return "\n".join(lines)


def source_file_for(mutant_id: str) -> str:
    """Map a mutant id such as ``keypad.x_press__mutmut_3`` to its file."""
    for path in MUTATED_PATHS:
        if mutant_id.startswith(path[: -len(".py")] + "."):
            return path
    return mutant_id.split(".", 1)[0] + ".py"


def function_for(mutant_id: str) -> str:
    m = _MUTANT_NAME.match(mutant_id)
    if m is None:
        return "?"
    return m.group("func").replace("ǁ", ".").strip(".")


def parse_results(text: str) -> MutationReport:
    """Tally ``<id>: <status>`` lines from ``mutmut results``.

    Survivors are taken from the same lines.  Anything else (headers,
    blank lines) is ignored.
    """
    report = MutationReport()
    for line in text.splitlines():
        m = _RESULT_LINE.match(line)
        if m is None:
            continue
        mutant_id, status = m.group("id"), m.group("status")
        report.counts[status] += 1
        if status == "survived":
            report.survivors.append(Mutant(
                id=mutant_id,
                status=status,
                source_file=source_file_for(mutant_id),
                function=function_for(mutant_id),
            ))
    return report


def parse_mutmut_results() -> MutationReport:
    """Run ``mutmut results`` and parse its output into a report."""
    try:
        result = subprocess.run(
            ["mutmut", "results", "--all", "true"],
            capture_output=True, text=True, cwd=".",
        )
    except FileNotFoundError:
        print("mutmut not installed.  Install with: pip install mutmut")
        sys.exit(1)

    if result.returncode != 0:
        logger.warning("mutmut results failed: %s", result.stderr.strip())
    return parse_results(result.stdout)


def main() -> None:
    print("Analyzing mutation testing results ...\n")
    report = parse_mutmut_results()
    print(report.summary())

    if report.total == 0:
        print("\nNo mutmut results found.  Run mutmut first:")
        print("  mutmut run")
        sys.exit(1)

    if report.score < 1.0:
        print("\nTarget:  100% mutation score")
        print(f"Current: {report.score:.1%}")
        print(f"Action:  Add tests for the {report.survived} surviving mutant(s)")
        sys.exit(1)
    else:
        print("\nMutation score target met!")


if __name__ == "__main__":
    main()
