"""
GitHub Actions workflow commands: outputs, secret masking and failure reporting.
"""

import os
import sys
import uuid
from typing import Optional, TextIO


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def add_mask(value: str, stream: Optional[TextIO] = None) -> None:
    """Ask the runner to redact value from all subsequent log output."""
    stream = stream or sys.stdout
    stream.write(f"::add-mask::{_escape_data(value)}\n")
    stream.flush()


def set_output(name: str, value: str, stream: Optional[TextIO] = None) -> None:
    """
    Publish a step output.

    Appends to the $GITHUB_OUTPUT file using the heredoc delimiter syntax, or
    falls back to the legacy ::set-output command when the file is not set
    (local runs).
    """
    output_file = os.environ.get("GITHUB_OUTPUT")
    if output_file:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with open(output_file, "a", encoding="utf-8") as fh:
            fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        return

    stream = stream or sys.stdout
    stream.write(f"::set-output name={name}::{_escape_data(value)}\n")
    stream.flush()


def set_failed(message: str, stream: Optional[TextIO] = None) -> None:
    """Emit an error annotation; the caller must exit non-zero."""
    stream = stream or sys.stdout
    stream.write(f"::error::{_escape_data(message)}\n")
    stream.flush()


def publish_secret_output(
    name: str, value: str, stream: Optional[TextIO] = None
) -> None:
    """Mask value, then publish it as a step output."""
    add_mask(value, stream=stream)
    set_output(name, value, stream=stream)
