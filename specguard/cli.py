#!/usr/bin/env python3
"""
specguard CLI - Entry point for pip-installed package.

Runs the same checks as the editor hooks against files on disk and prints
the hook registration snippet.
"""

import argparse
import sys
from pathlib import Path

from . import __version__
from .architecture import check_architecture, classify_path, format_violation_message
from .config import Settings, load_settings
from .guard_types import BLUE, GREEN, NC, RED, UNMARKED, YELLOW, ConfigError
from .phases import (
    check_phase_review,
    detect_current_phase,
    extract_phases,
    is_spec_document,
    parse_review_statuses,
)


def get_hooks_json_path() -> Path:
    """Get path to the bundled hooks.json."""
    return Path(__file__).parent / "claude_integration" / "hooks.json"


def _read_file(filepath: str) -> str | None:
    try:
        return Path(filepath).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"{YELLOW}SKIP{NC} {filepath}: {e}")
        return None


def run_arch(files: list[str], settings: Settings, strict: bool = False) -> int:
    """Check each file's imports against its layer. Returns the exit code."""
    print(f"{BLUE}specguard - Architecture Check{NC}")
    print("=" * 30)

    total = 0
    for filepath in files:
        content = _read_file(filepath)
        if content is None:
            continue

        classification = classify_path(filepath, settings.registry)
        if not classification.recognized:
            print(f"{YELLOW}SKIP{NC} {filepath} (no layer)")
            continue

        violations = check_architecture(filepath, content, settings.registry)
        if violations:
            total += len(violations)
            print(f"{RED}WARN{NC} {filepath}")
            print(format_violation_message(filepath, violations))
        else:
            print(f"{GREEN}OK{NC}   {filepath} [{classification.ecosystem}/{classification.layer}]")

    print("=" * 30)
    print(f"VIOLATIONS: {total}")

    if total and strict:
        return 1
    return 0


def run_phases(filepath: str, settings: Settings, edit_line: int | None = None) -> int:
    """Print the review state of a document and the gate decision."""
    content = _read_file(filepath)
    if content is None:
        return 2

    print(f"{BLUE}specguard - Phase Review{NC}")
    print("=" * 30)

    phases = extract_phases(content)
    if not phases:
        print(f"{GREEN}No Phase headings in {filepath}, edits are not gated{NC}")
        return 0

    statuses = parse_review_statuses(content, phases)
    current = detect_current_phase(phases, edit_line)
    for phase in phases:
        review = statuses.get(phase.number)
        status = review.status if review else UNMARKED
        marker = "  <- editing" if current is not None and phase == current else ""
        color = GREEN if status == "APPROVED" else YELLOW
        print(f"  L{phase.line:<5} {phase.title:<40} {color}{status}{NC}{marker}")
    print("=" * 30)

    if not is_spec_document(filepath, settings.document_patterns):
        print(f"{YELLOW}{Path(filepath).name} is not a spec document, the gate does not apply{NC}")
        return 0

    decision = check_phase_review(
        filepath, content, edit_line=edit_line, document_patterns=settings.document_patterns,
    )
    if decision.allowed:
        print(f"{GREEN}specguard: ALLOWED{NC}")
        return 0

    print(f"{RED}{decision.message}{NC}")
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="specguard",
        description="specguard - layer and review guardrails for AI-assisted editing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  specguard arch src/controller/OrderController.java
  specguard arch --strict $(git ls-files '*.java')
  specguard phases checkout.spec.md --line 120
  specguard --hooks          Print hooks.json for .claude/settings.json
        """,
    )
    parser.add_argument("--version", "-v", action="version", version=f"specguard {__version__}")
    parser.add_argument("--config", "-c", help="Path to specguard.yaml")
    parser.add_argument("--hooks", action="store_true", help="Print the hook registration JSON")

    subparsers = parser.add_subparsers(dest="command")

    arch = subparsers.add_parser("arch", help="Check source files for layer violations")
    arch.add_argument("files", nargs="+", help="Source files to check")
    arch.add_argument("--strict", action="store_true", help="Exit 1 when any violation is found")

    phases = subparsers.add_parser("phases", help="Show review state of a spec document")
    phases.add_argument("file", help="Spec document to check")
    phases.add_argument("--line", type=int, help="1-based line being edited")

    args = parser.parse_args(argv)

    if args.hooks:
        print(get_hooks_json_path().read_text(encoding="utf-8"))
        return 0

    if not args.command:
        parser.print_help()
        return 0

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"{RED}ERROR: {e}{NC}")
        return 2

    if args.command == "arch":
        return run_arch(args.files, settings, strict=args.strict)
    return run_phases(args.file, settings, edit_line=args.line)


if __name__ == "__main__":
    sys.exit(main())
