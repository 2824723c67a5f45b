"""Output sinks — one complete line per write, thread-safe."""

import os
import sys
import threading
from typing import Protocol, TextIO


class Sink(Protocol):
    def write(self, line: str) -> None:
        ...


class StreamSink:
    """Writes to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so redirected/captured stdout is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def write(self, line: str) -> None:
        with self._lock:
            stream = self.stream
            stream.write(line + "\n")
            stream.flush()


class FileSink:
    """Appends lines to a file, creating its directory if needed."""

    def __init__(self, path: str):
        self._path = path
        self._lock = threading.Lock()
        dir_path = os.path.dirname(path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        self._file_handle = open(path, "a", encoding="utf-8")

    @property
    def path(self) -> str:
        return self._path

    def write(self, line: str) -> None:
        with self._lock:
            self._file_handle.write(line + "\n")
            self._file_handle.flush()

    def close(self):
        with self._lock:
            if not self._file_handle.closed:
                self._file_handle.close()


class MemorySink:
    """Keeps rendered lines in a list."""

    def __init__(self):
        self._lock = threading.Lock()
        self._lines: list[str] = []

    def write(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    @property
    def lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    def clear(self):
        with self._lock:
            self._lines.clear()
