"""
Replay — feeds a pipeline log through the activity monitor.

Each line of the log is one frame: lines that parse as a JSON object are
treated as structured frames, everything else as a text line. With no file
the built-in sample orchestrator run is replayed.

Usage:
    python replay.py [LOG_FILE] [--delay SEC] [--max-records N] [--json]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

import config
from features.activity import ActivityMonitor, ActivityRecord
from features.activity.query import stage_label
from features.activity.samples import SAMPLE_PIPELINE_LOG

log = logging.getLogger(__name__)


def parse_line(line: str):
    """A JSON object line becomes a structured frame; anything else stays text."""
    stripped = line.strip()
    if stripped.startswith("{"):
        try:
            frame = json.loads(stripped)
        except json.JSONDecodeError:
            return line
        if isinstance(frame, dict):
            return frame
    return line


def read_frames(path: Path | None) -> list:
    if path is None:
        return list(SAMPLE_PIPELINE_LOG)
    with open(path, encoding="utf-8", errors="replace") as f:
        return [parse_line(line) for line in f if line.strip()]


def _log_record(record: ActivityRecord) -> None:
    progress = f"{record.progress:>3}%" if record.progress is not None else "    "
    log.info(
        "%s %-7s %-22s %-18s %s",
        progress, record.level.value, stage_label(record.type), record.agent, record.message,
    )


def replay(frames, monitor: ActivityMonitor, delay: float = 0.0) -> ActivityMonitor:
    """Ingest frames in order, sleeping ``delay`` seconds between them."""
    unsubscribe = monitor.subscribe(_log_record)
    try:
        for i, frame in enumerate(frames):
            if i and delay > 0:
                time.sleep(delay)
            monitor.ingest(frame)
    finally:
        unsubscribe()
    return monitor


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Replay a pipeline log through the activity monitor")
    parser.add_argument("log_file", nargs="?", type=Path, help="log file (default: built-in sample run)")
    parser.add_argument("--delay", type=float, default=config.REPLAY_DELAY_SEC,
                        help="seconds between frames")
    parser.add_argument("--max-records", type=int, default=config.MONITOR_MAX_RECORDS,
                        help="history capacity")
    parser.add_argument("--json", action="store_true", help="print a JSON snapshot instead of a summary")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format=config.LOG_FORMAT,
        datefmt=config.LOG_DATEFMT,
    )

    if args.max_records < 1:
        parser.error("--max-records must be >= 1")
    try:
        frames = read_frames(args.log_file)
    except OSError as e:
        log.error("Could not read %s: %s", args.log_file, e)
        return 1

    monitor = ActivityMonitor(max_records=args.max_records)
    log.info("Replaying %d frames", len(frames))
    replay(frames, monitor, delay=args.delay)

    if args.json:
        snapshot = {
            "progress": monitor.progress,
            "records": [r.to_dict() for r in monitor.records()],
            "agents": [a.to_dict() for a in monitor.agents()],
        }
        json.dump(snapshot, sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        summary = monitor.summary()
        log.info(
            "Replay complete: %d records, progress %d%%, levels %s",
            summary["total_records"], summary["progress"], summary["levels"],
        )
        for agent in monitor.agents():
            log.info(
                "  %-18s %-8s tasks=%d avg=%.0fms success=%.0f%%",
                agent.name, agent.status.value, agent.tasks_completed,
                agent.avg_response_time, agent.success_rate,
            )
    monitor.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
