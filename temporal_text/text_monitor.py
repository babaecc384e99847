#!/usr/bin/env python3
"""
Temporal Text Monitor

Replays per-frame recognition results through the stability tracker and the
ranked candidate queue. Stable strings are reported as they appear; the
best-ranked "interesting" candidate is posted on every flush interval.

Usage:
    python -m temporal_text.text_monitor --input frames.jsonl --endpoint http://host:5000/api/rawtext
    python -m temporal_text.text_monitor --input frames.json --config monitor.yaml --fps 30
"""

import argparse
import logging
import sys
from pathlib import Path

from temporal_text.core import (
    LoggingNotificationSink,
    TextMonitorPipeline,
    load_config,
    load_frame_batches,
    save_events,
)
from temporal_text.core.utils import candidate_to_dict


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Temporal text monitor for recorded recognition results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replay as fast as possible, log notifications only
  python -m temporal_text.text_monitor --input frames.jsonl --dry_run

  # Replay at 30 fps, posting every 5 seconds
  python -m temporal_text.text_monitor --input frames.jsonl --fps 30 \\
      --flush_interval 5 --endpoint http://localhost:5000/api/rawtext

  # Use a YAML config and save events
  python -m temporal_text.text_monitor --input frames.json --config monitor.yaml --out_dir out
        """
    )

    parser.add_argument(
        "--input", "-i", required=True,
        help="Recorded frame batches (.json list or .jsonl, one batch per line)"
    )
    parser.add_argument(
        "--config", default=None,
        help="YAML config file with MonitorConfig keys"
    )
    parser.add_argument(
        "--endpoint", default=None,
        help="Notification endpoint URL (overrides config and environment)"
    )
    parser.add_argument(
        "--window_size", type=int, default=None,
        help="Frames kept in the stability window (default: 25)"
    )
    parser.add_argument(
        "--stable_threshold", type=int, default=None,
        help="Frames a string must appear in to be stable (default: 10)"
    )
    parser.add_argument(
        "--flush_interval", type=float, default=None,
        help="Seconds between flushes (default: 20)"
    )
    parser.add_argument(
        "--marker", default=None,
        help="Substring marking interesting text (default: '?')"
    )
    parser.add_argument(
        "--pattern", default=None,
        help="Regex marking interesting text (takes precedence over --marker)"
    )
    parser.add_argument(
        "--fps", type=float, default=None,
        help="Replay rate in frames per second (default: unpaced)"
    )
    parser.add_argument(
        "--out_dir", "-o", default=None,
        help="Directory for events.json (default: not saved)"
    )
    parser.add_argument(
        "--dry_run", action="store_true",
        help="Log notifications instead of sending them"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Verbose output"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = load_config(
            args.config,
            window_size=args.window_size,
            stable_threshold=args.stable_threshold,
            flush_interval=args.flush_interval,
            interesting_marker=args.marker,
            interesting_pattern=args.pattern,
            sink_endpoint=args.endpoint,
        )
        batches = load_frame_batches(args.input)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"[Temporal Text] Input: {args.input} ({len(batches)} frames)")
    print(f"[Temporal Text] Window: {config.window_size}, threshold: {config.stable_threshold}")
    print(f"[Temporal Text] Flush interval: {config.flush_interval}s")
    print(f"[Temporal Text] Sink: {'dry run' if args.dry_run else config.sink_endpoint or 'log only'}")
    print()

    events = []

    def record_stable(result):
        events.append({"event": "stable", "text": result.text,
                       "count": result.count, "frame_index": result.frame_index})

    def record_flush(candidate):
        events.append({"event": "flush", "candidate": candidate_to_dict(candidate)})

    sink = LoggingNotificationSink() if args.dry_run else None
    pipeline = TextMonitorPipeline(
        config, sink=sink, on_stable=record_stable, on_flush=record_flush
    )

    with pipeline:
        stable_results = pipeline.run(batches, fps=args.fps)
        # Final flush so the last epoch is not lost when the replay ends.
        pipeline.flush()

    flushes = [e for e in events if e["event"] == "flush"]

    print("\n" + "=" * 60)
    print("TEMPORAL TEXT RESULT")
    print("=" * 60)
    print(f"Frames processed: {pipeline.tracker.frames_observed}")
    print(f"Stable strings: {len(stable_results)}")
    for r in stable_results:
        print(f"  frame {r.frame_index:>5}: {r.text}")
    print("-" * 60)
    print(f"Flushes: {len(flushes)}")
    for e in flushes:
        candidate = e["candidate"]
        if candidate is None:
            print("  (empty)")
        else:
            print(f"  {candidate['text']} (priority {candidate['priority']})")
    print("=" * 60)

    if args.out_dir:
        json_path = save_events(events, Path(args.out_dir))
        print(f"\nEvents saved to: {json_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
