"""HTTP server for davessg.

Serves the build directory with the standard library file handler. In watch
mode the source and template folders are observed and changed files are
rebuilt incrementally while the server keeps running. An edit to the template
forces every page to be rebuilt.

Key classes:
- StaticServer: Serves a build directory and optionally watches for changes.
- _StaticHandler: Request handler that disables caching and logs via the console.
- _ChangeHandler: File system event handler for triggering rebuilds.
"""

from __future__ import annotations

import functools
import threading
import time
from collections.abc import Callable
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import BuildError
from .console import Console


def parse_bind_addr(bind_addr: str) -> tuple[str, int]:
    """Split a ``host:port`` bind address.

    An empty host (``":8009"``) listens on all interfaces.

    Args:
        bind_addr: Address in ``host:port`` form.

    Returns:
        Tuple of (host, port).

    Raises:
        ValueError: If the port is missing or not a valid port number.

    Examples:
        >>> parse_bind_addr("localhost:8009")
        ('localhost', 8009)
    """
    host, sep, port_text = bind_addr.rpartition(":")
    if not sep or not port_text.isdigit():
        raise ValueError(f"expected host:port, got {bind_addr!r}")
    port = int(port_text)
    if port > 65535:
        raise ValueError(f"port out of range: {port}")
    return host, port


class _StaticHandler(SimpleHTTPRequestHandler):
    """Serves files from the build directory.

    Attributes:
        console: Console that receives request log lines.
    """

    console: Console = Console()

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def log_message(self, format, *args):
        self.console.debug(f"{self.address_string()} - {format % args}")


class StaticServer:
    """Serves a build directory over HTTP.

    Attributes:
        build_dir: Directory being served.
        host: Interface to bind.
        port: Port to bind.
        console: Console for progress output.
        rebuild_fn: Callable that rebuilds the site in watch mode. It is
            called with ``force=True`` after the template changes.
        template_path: Template file whose edits force a full rebuild.
        _observer: File system observer for changes.
        _timer: Pending trailing rebuild, if one is scheduled.
    """

    def __init__(
        self,
        build_dir: Path,
        host: str,
        port: int,
        console: Console | None = None,
        rebuild_fn: Callable[..., object] | None = None,
        template_path: Path | None = None,
    ):
        self.build_dir = build_dir
        self.host = host
        self.port = port
        self.console = console or Console()
        self.rebuild_fn = rebuild_fn
        self.template_path = template_path
        self._observer: Observer | None = None
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._rebuilding = False
        self._pending = False
        self._pending_force = False
        self._last_rebuild_at = 0.0
        self._debounce_seconds = 0.2

    def make_httpd(self) -> ThreadingHTTPServer:
        handler_cls = type(
            "_StaticHandlerWithConsole",
            (_StaticHandler,),
            {"console": self.console},
        )
        handler = functools.partial(handler_cls, directory=str(self.build_dir))
        return ThreadingHTTPServer((self.host, self.port), handler)

    def start(self, watch_paths: list[Path] | None = None) -> None:  # pragma: no cover - integration path
        """Serve until interrupted, watching the given paths if any."""
        httpd = self.make_httpd()
        if watch_paths:
            self._start_watcher(watch_paths)
        self.console.info(f"Listening on {self.host or '0.0.0.0'}:{self.port}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            httpd.server_close()
            self.stop()

    def stop(self) -> None:
        if self._timer:
            self._timer.cancel()
            self._timer = None
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def _start_watcher(self, watch_paths: list[Path]) -> None:
        handler = _ChangeHandler(self)
        observer = Observer()
        for watch_path in watch_paths:
            if watch_path.exists():
                observer.schedule(handler, str(watch_path), recursive=True)
        observer.start()
        self._observer = observer

    def is_template(self, path: Path | None) -> bool:
        if path is None or self.template_path is None:
            return False
        return path.resolve() == self.template_path.resolve()

    def rebuild(self, path: Path | None = None) -> None:
        """Rebuild after a change to path.

        Changes that arrive while a rebuild runs, or inside the debounce
        window, are folded into a single trailing rebuild.
        """
        if self.rebuild_fn is None:
            return
        with self._lock:
            self._pending_force = self._pending_force or self.is_template(path)
            wait = self._debounce_seconds - (time.time() - self._last_rebuild_at)
            if self._rebuilding or wait > 0:
                self._pending = True
                if not self._rebuilding:
                    self._schedule_trailing(wait)
                return
            self._rebuilding = True
            self._pending = False
            force, self._pending_force = self._pending_force, False

        try:
            self.console.info("Change detected; rebuilding...")
            if force:
                self.rebuild_fn(force=True)
            else:
                self.rebuild_fn()
        except BuildError as exc:
            # Keep serving so the source can be fixed and saved again
            self.console.error(
                "Build failed:", file=str(exc.source_path), error=exc.message
            )
        finally:
            with self._lock:
                self._rebuilding = False
                self._last_rebuild_at = time.time()
                if self._pending:
                    self._schedule_trailing(self._debounce_seconds)

    def _schedule_trailing(self, wait: float) -> None:
        if self._timer is not None and self._timer.is_alive():
            return
        timer = threading.Timer(wait, self._run_trailing)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _run_trailing(self) -> None:
        with self._lock:
            self._timer = None
            if not self._pending:
                return
        self.rebuild()


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: StaticServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path).resolve()
        try:
            path.relative_to(self.server.build_dir.resolve())
            return
        except ValueError:
            pass
        self.server.rebuild(path)
