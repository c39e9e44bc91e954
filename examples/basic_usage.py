#!/usr/bin/env python3
"""
Basic usage example for jobtail.

This example demonstrates:
- Rendering raw terminal output with TailRenderer
- Following a growing log file
- Following a job's stdout/stderr pair and reading the merged view
"""

import tempfile
from pathlib import Path

from jobtail import JobLogSession, LogFollower, StreamLabel, TailRenderer


def main():
    # Progress bars redraw in place
    renderer = TailRenderer()
    renderer.ingest(b"Downloading\n 10% |#     |\r 60% |####  |\r100% |######|\n")
    renderer.ingest(b"\x1b[32mdone\x1b[0m\n")
    print("Rendered:")
    print(renderer.content())

    with tempfile.TemporaryDirectory() as tmpdir:
        log_dir = Path(tmpdir)
        out_path = log_dir / "1001.out"

        # Follow a file as it grows
        follower = LogFollower(out_path)
        print(f"\nMissing before creation: {follower.poll(StreamLabel.OUT).missing}")

        out_path.write_bytes(b"epoch 1 loss=0.91\nepoch 2 ")
        chunk = follower.poll(StreamLabel.OUT)
        print(f"New lines: {chunk.new_lines}, current line: {chunk.current_line!r}")

        with open(out_path, "ab") as f:
            f.write(b"loss=0.52\n")
        print(f"New lines: {follower.poll(StreamLabel.OUT).new_lines}")

        # Follow both streams of a job
        (log_dir / "1001.err").write_bytes(b"warning: low memory\n")
        session = JobLogSession(log_dir)
        session.select_job("1001")
        snapshot = session.poll(merged_width=60)
        print("\nMerged view:")
        print(snapshot.merged)


if __name__ == "__main__":
    main()
