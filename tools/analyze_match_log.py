#!/usr/bin/env python3
"""
Summarise a match debug log written by ``MatchDebugger``.

Usage:
    python tools/analyze_match_log.py <log_file_path>
"""

import re
import sys
from collections import Counter
from pathlib import Path

ENTRY = re.compile(r"^\[(\d\d:\d\d:\d\d)\] (\w+): (.*)$")
MATCH_EVENT = re.compile(r"Minute: (\d+) \| Event: (\w+) \| Details: (.*)$")
CONTROL = re.compile(r"Command: (\w+)(?: \| Details: (.*))?$")


def parse_log_file(log_path):
    """Parse the debug log into match events, controls and errors."""
    events = []
    controls = []
    errors = []

    with open(log_path, "r", encoding="utf-8") as f:
        for line in f:
            entry = ENTRY.match(line.rstrip("\n"))
            if not entry:
                continue
            _, kind, body = entry.groups()

            if kind == "MATCH_EVENT":
                match = MATCH_EVENT.search(body)
                if match:
                    minute, event_type, details = match.groups()
                    events.append((int(minute), event_type, details))
            elif kind == "CONTROL":
                match = CONTROL.search(body)
                if match:
                    controls.append(match.groups())
            elif kind == "ERROR":
                errors.append(body)

    return {
        "events": events,
        "event_types": Counter(event_type for _, event_type, _ in events if event_type != "tick"),
        "controls": controls,
        "errors": errors,
    }


def analyze_scoring(events):
    """Report goals per half and shot conversion."""
    print("\n=== SCORING ANALYSIS ===")
    goals = [(minute, details) for minute, event_type, details in events if event_type in ("goal", "ownGoal")]
    shots = sum(1 for _, event_type, _ in events if event_type in ("shot", "shotOnTarget", "shotOffTarget"))
    on_target = sum(1 for _, event_type, _ in events if event_type == "shotOnTarget")

    print(f"Total goals: {len(goals)}")
    print(f"  First half: {sum(1 for minute, _ in goals if minute <= 45)}")
    print(f"  Second half: {sum(1 for minute, _ in goals if minute > 45)}")
    for minute, details in goals:
        print(f"  {minute}' {details}")

    print(f"Shots: {shots}, on target: {on_target}")
    if shots:
        print(f"  Conversion: {len(goals) / shots * 100:.1f}%")
    if len(goals) > 10:
        print("  ⚠️  Unusually high scoring match")


def analyze_discipline(events):
    """Report cards, fouls and injuries."""
    print("\n=== DISCIPLINE ANALYSIS ===")
    counts = Counter(event_type for _, event_type, _ in events)
    print(f"  Fouls: {counts['foul']}")
    print(f"  Yellow cards: {counts['yellowCard']}")
    print(f"  Red cards: {counts['redCard']}")
    print(f"  Injuries: {counts['injury']}")
    print(f"  Substitutions: {counts['substitution']}")


def analyze_timeline(events):
    """Check that the log covers a whole match in order."""
    print("\n=== TIMELINE ANALYSIS ===")
    minutes = [minute for minute, _, _ in events]
    if not minutes:
        print("  ⚠️  No match events recorded")
        return
    print(f"  Minutes covered: {minutes[0]} to {minutes[-1]}")
    regressions = sum(1 for before, after in zip(minutes, minutes[1:]) if after < before)
    if regressions:
        print(f"  ⚠️  Minute went backwards {regressions} times")
    kinds = {event_type for _, event_type, _ in events}
    for marker in ("kickoff", "halfTime", "fullTime"):
        if marker not in kinds:
            print(f"  ⚠️  No {marker} event logged")


def analyze_controls(controls, errors):
    """List control commands and errors issued during the session."""
    print("\n=== CONTROL ANALYSIS ===")
    commands = Counter(command for command, _ in controls)
    for command, count in commands.most_common():
        print(f"  {command}: {count}")
    if errors:
        print(f"  ⚠️  {len(errors)} errors logged")
        for error in errors[:5]:
            print(f"    {error}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python tools/analyze_match_log.py <log_file_path>")
        print("\nExample:")
        print("  python tools/analyze_match_log.py debug_logs/match_debug_20251117_222236.txt")
        sys.exit(1)

    log_path = Path(sys.argv[1])

    if not log_path.exists():
        print(f"Error: Log file not found: {log_path}")
        sys.exit(1)

    print(f"Analyzing: {log_path.name}")
    print("=" * 60)

    data = parse_log_file(log_path)

    print("\n=== EVENT SUMMARY ===")
    for event_type, count in data["event_types"].most_common(15):
        print(f"  {event_type}: {count}")

    analyze_scoring(data["events"])
    analyze_discipline(data["events"])
    analyze_timeline(data["events"])
    analyze_controls(data["controls"], data["errors"])

    print("\n" + "=" * 60)
    print("Analysis complete!")


if __name__ == "__main__":
    main()
