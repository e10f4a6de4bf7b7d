"""Standard-library classifier backed by a helper interpreter.

The interpreter that runs the generator is not necessarily the one the
workspace targets, so the question is answered by a separate process running
the target interpreter. The helper reads one module name per line on stdin
and answers ``true`` or ``false`` per line on stdout.
"""

from __future__ import annotations

import logging
import subprocess
import sys
import threading

from ..errors import ClassifierError

logger = logging.getLogger(__name__)

HELPER_SCRIPT = """\
import sys

names = set(getattr(sys, "stdlib_module_names", ())) | set(sys.builtin_module_names)
for line in sys.stdin:
    module = line.strip()
    if not module:
        continue
    print("true" if module.split(".")[0] in names else "false", flush=True)
"""


class StdlibClassifier:
    """Memoizing, thread-safe client of the helper process.

    The process is started lazily on first query and reused for the rest of
    the run. Any failure to start it, write to it or read an answer raises
    ``ClassifierError``; nothing is retried.
    """

    def __init__(self, python: str | None = None):
        self.python = python or sys.executable
        self._cache: dict[str, bool] = {}
        self._lock = threading.Lock()
        self._process: subprocess.Popen | None = None

    def is_standard_library(self, module_name: str) -> bool:
        with self._lock:
            if module_name in self._cache:
                return self._cache[module_name]
            answer = self._ask(module_name)
            self._cache[module_name] = answer
            return answer

    def _ask(self, module_name: str) -> bool:
        process = self._ensure_process()
        if process.stdin is None or process.stdout is None:
            raise ClassifierError(f"Standard-library classifier {self.python!r} has no stdin/stdout pipes")
        try:
            process.stdin.write(module_name + "\n")
            process.stdin.flush()
            reply = process.stdout.readline()
        except OSError as e:
            raise ClassifierError(f"Standard-library classifier failed on {module_name!r}: {e}") from e

        reply = reply.strip()
        if reply not in ("true", "false"):
            code = process.poll()
            raise ClassifierError(
                f"Standard-library classifier gave no answer for {module_name!r}"
                + (f" (exited with {code})" if code is not None else f": {reply!r}")
            )
        logger.debug(f"[stdlib:classify] {module_name} -> {reply}")
        return reply == "true"

    def _ensure_process(self) -> subprocess.Popen:
        if self._process is not None and self._process.poll() is None:
            return self._process
        if self._process is not None:
            raise ClassifierError(f"Standard-library classifier exited with {self._process.returncode}")

        cmd = [self.python, "-c", HELPER_SCRIPT]
        logger.debug(f"[stdlib:start] {self.python}")
        try:
            self._process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise ClassifierError(f"Cannot start standard-library classifier {self.python!r}: {e}") from e
        return self._process

    def close(self) -> None:
        with self._lock:
            if self._process is None:
                return
            if self._process.stdin:
                self._process.stdin.close()
            try:
                self._process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._process.kill()
            self._process = None

    def __enter__(self) -> StdlibClassifier:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"StdlibClassifier({self.python}, {len(self._cache)} cached)"
