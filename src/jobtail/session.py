"""Polling of the stdout/stderr pair belonging to one job."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .errors import FollowError, JobtailError
from .file.follower import INITIAL_TAIL_BYTES, LogFollower
from .merged import MergedBuffer
from .renderer import RENDER_LINE_LIMIT
from .stream import StreamChunk, StreamLabel
from .width import wrap_lines

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_LOG_DIR = "slurm_logs"

_STREAM_NAMES = {StreamLabel.OUT: "stdout", StreamLabel.ERR: "stderr"}
_WAITING_TEXT = {StreamLabel.OUT: "output", StreamLabel.ERR: "error"}


def job_log_paths(job_id: str, log_dir: Union[Path, str] = DEFAULT_LOG_DIR) -> Tuple[Path, Path]:
    """
    Conventional stdout and stderr paths for a job.

    Args:
        job_id: Scheduler job identifier
        log_dir: Directory the scheduler writes job logs into

    Returns:
        Tuple of (``<log_dir>/<job_id>.out``, ``<log_dir>/<job_id>.err``)
    """
    log_dir = Path(log_dir)
    return log_dir / f"{job_id}.out", log_dir / f"{job_id}.err"


@dataclass
class SessionSnapshot:
    """Rendered state of a session after one poll."""

    stdout: str
    stderr: str
    merged: str
    out_chunk: StreamChunk
    err_chunk: StreamChunk
    errors: List[str] = field(default_factory=list)


class JobLogSession:
    """
    Follows the stdout and stderr logs of the selected job.

    Owns one follower per stream plus the merged view. Selecting another job
    resets the existing followers instead of creating new ones.
    """

    def __init__(
        self,
        log_dir: Union[Path, str] = DEFAULT_LOG_DIR,
        limit: int = RENDER_LINE_LIMIT,
        initial_tail_bytes: int = INITIAL_TAIL_BYTES,
    ):
        self.log_dir = Path(log_dir)
        self.limit = limit
        self.initial_tail_bytes = initial_tail_bytes
        self.name: Optional[str] = None
        self.followers = {}
        self.merged = MergedBuffer(limit)

    def select_job(self, job_id: str) -> None:
        """Follow the logs of ``job_id`` inside the session's log directory."""
        out_path, err_path = job_log_paths(job_id, self.log_dir)
        self.follow_paths(out_path, err_path, name=job_id)

    def follow_paths(self, out_path: Union[Path, str], err_path: Union[Path, str], name: Optional[str] = None) -> None:
        """
        Follow an explicit pair of files.

        Args:
            out_path: File receiving the job's standard output
            err_path: File receiving the job's standard error
            name: Name used in "waiting" placeholders (defaults to the stdout
                file's stem)
        """
        self.name = name or Path(out_path).stem
        logger.info(f"Selected {self.name}: {out_path}, {err_path}")
        for label, path in ((StreamLabel.OUT, out_path), (StreamLabel.ERR, err_path)):
            follower = self.followers.get(label)
            if follower is None:
                self.followers[label] = LogFollower(path, self.limit, self.initial_tail_bytes)
            else:
                follower.reset(path)
        self.merged.reset()

    def poll(self, width: int = 0, merged_width: int = 0) -> SessionSnapshot:
        """
        Poll both streams and render them.

        Read errors do not stop the poll: they are logged, reported in the
        snapshot's ``errors`` and the stream keeps its previous content.

        Args:
            width: Wrap width for the separate stdout/stderr views
            merged_width: Wrap width for the merged view

        Returns:
            SessionSnapshot with rendered text for each view

        Raises:
            JobtailError: If no job has been selected
        """
        if not self.followers:
            raise JobtailError("No job selected")

        errors = []
        chunks = {}
        for label in StreamLabel:
            try:
                chunks[label] = self.followers[label].poll(label)
            except FollowError as e:
                logger.warning(f"Log read error ({_STREAM_NAMES[label]}): {e}")
                errors.append(f"log read error ({_STREAM_NAMES[label]}): {e.cause}")
                chunks[label] = e.chunk

        for label in StreamLabel:
            self.merged.apply_chunk(chunks[label])

        merged_lines = self.merged.lines()
        if merged_width > 0:
            merged_lines = wrap_lines(merged_lines, merged_width)

        return SessionSnapshot(
            stdout=self._stream_content(StreamLabel.OUT, chunks[StreamLabel.OUT], width),
            stderr=self._stream_content(StreamLabel.ERR, chunks[StreamLabel.ERR], width),
            merged="\n".join(merged_lines),
            out_chunk=chunks[StreamLabel.OUT],
            err_chunk=chunks[StreamLabel.ERR],
            errors=errors,
        )

    def waiting_message(self, label: StreamLabel) -> str:
        """Placeholder shown while a stream's log file does not exist."""
        return f"Waiting for {_WAITING_TEXT[label]} log for job {self.name}..."

    def _stream_content(self, label: StreamLabel, chunk: StreamChunk, width: int) -> str:
        content = self.followers[label].content(width)
        if chunk.missing and not content:
            return self.waiting_message(label)
        return content
