"""
Run controller.

Processes vector files one at a time and one vector at a time. Each vector
runs inside its own failure boundary: a VectorFailure or VectorSkipped ends
that vector only and processing resumes with the next one.

Report format (per file):
    --------------------------------------------------------------
    Processing vectors from noise-c-basic.txt
    Noise_NN_25519_AESGCM_SHA256 ... ok
    NoisePSK_NN_25519_AESGCM_SHA256 ... skipped
    Noise_XX_25519_AESGCM_SHA256 ... ciphertext wrong at message 1
        actual  : ...
        expected: ...
    -> test data at noise-c-basic.txt:42
    2 passed, 1 failed, 1 skipped
    --------------------------------------------------------------
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TextIO

from noise_vectors._logging import get_logger
from noise_vectors.config import RunConfig
from noise_vectors.constants import SEPARATOR
from noise_vectors.engine import HandshakeState
from noise_vectors.exceptions import VectorFailure, VectorSkipped, WireMismatchError
from noise_vectors.hexcodec import format_block
from noise_vectors.parser import VectorParser
from noise_vectors.replay import EngineFactory, replay_vector
from noise_vectors.tokens import TokenReader
from noise_vectors.validation import check_protocol_name
from noise_vectors.vector import TestVector

__all__ = [
    "FileSummary",
    "Outcome",
    "RunContext",
    "process_file",
    "run_files",
    "run_vector",
]

_logger = get_logger(__name__)


class Outcome(Enum):
    """Result of running one vector."""

    PASSED = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class FileSummary:
    """Aggregate result for one vector file."""

    filename: str
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    parse_errors: int = 0
    opened: bool = True

    def record(self, outcome: Outcome) -> None:
        if outcome is Outcome.PASSED:
            self.passed += 1
        elif outcome is Outcome.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def ok(self) -> bool:
        """False if the file could not be read, a vector failed, or anything failed to parse."""
        return self.opened and self.failed == 0 and self.parse_errors == 0


@dataclass
class RunContext:
    """State threaded through one run over one or more files."""

    config: RunConfig = field(default_factory=RunConfig)
    out: TextIO = field(default_factory=lambda: sys.stdout)
    err: TextIO = field(default_factory=lambda: sys.stderr)
    engine_factory: EngineFactory = HandshakeState.new_by_name
    summaries: list[FileSummary] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(summary.ok for summary in self.summaries)


def run_vector(context: RunContext, vector: TestVector, filename: str) -> Outcome:
    """
    Validate and replay one vector, printing its result line.

    Args:
        context: Run state (output stream, engine factory)
        vector: Parsed vector
        filename: Source file, for the failure location line

    Returns:
        The vector's outcome; never raises VectorFailure or VectorSkipped
    """
    out = context.out
    print(f"{vector.name} ... ", end="", file=out)
    out.flush()
    try:
        check_protocol_name(vector)
        replay_vector(vector, engine_factory=context.engine_factory)
    except VectorSkipped as e:
        _logger.debug("Vector skipped: name=%s reason=%s", vector.name, e)
        print("skipped", file=out)
        return Outcome.SKIPPED
    except VectorFailure as e:
        _logger.debug("Vector failed: name=%s error_type=%s", vector.name, type(e).__name__)
        _report_failure(out, e)
        print(f"-> test data at {filename}:{vector.line_number}", file=out)
        return Outcome.FAILED
    print("ok", file=out)
    return Outcome.PASSED


def process_file(context: RunContext, path: str | Path) -> FileSummary:
    """
    Parse and run every vector in one file.

    A file that cannot be read is reported on the error stream and yields a
    failing summary.
    """
    summary = FileSummary(str(path))
    context.summaries.append(summary)
    try:
        reader = TokenReader.from_path(path, err=context.err)
    except OSError as e:
        print(f"{path}: {e.strerror or e}", file=context.err)
        summary.opened = False
        return summary
    except UnicodeDecodeError as e:
        print(f"{path}: {e}", file=context.err)
        summary.opened = False
        return summary

    out = context.out
    print(SEPARATOR, file=out)
    print(f"Processing vectors from {reader.filename}", file=out)
    for vector in VectorParser(reader, context.config).parse_file():
        if vector is not None:
            summary.record(run_vector(context, vector, reader.filename))
    summary.parse_errors = reader.errors

    line = f"{summary.passed} passed, {summary.failed} failed, {summary.skipped} skipped"
    if summary.parse_errors:
        line += f", {summary.parse_errors} parse errors"
    print(line, file=out)
    print(SEPARATOR, file=out)
    _logger.debug("File processed: filename=%s ok=%s", summary.filename, summary.ok)
    return summary


def run_files(context: RunContext, paths: Iterable[str | Path]) -> bool:
    """
    Process each file in order.

    Returns:
        True only if every file was read and passed
    """
    for path in paths:
        process_file(context, path)
    return context.ok


def _report_failure(out: TextIO, error: VectorFailure) -> None:
    print(error, file=out)
    if isinstance(error, WireMismatchError):
        print(f"    actual  :{format_block(error.actual)}", file=out)
        print(f"    expected:{format_block(error.expected)}", file=out)
