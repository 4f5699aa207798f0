"""
Fake memcached text-protocol server for tests.

Understands ``stats``, ``set``, ``get`` and ``quit``. Behaviour can be bent
per test:

- ``stats``: list of (name, value) pairs returned by ``stats``
- ``silent``: accept connections but never answer
- ``corrupt_get``: answer ``get`` with a different payload
- ``trickle``: send this many bytes one at a time, never a newline
"""

import socketserver
import threading

DEFAULT_STATS = [
    ("pid", "1234"),
    ("uptime", "500"),
    ("version", "1.6.21"),
    ("rusage_user", "0.123456"),
    ("curr_items", "42"),
]


class _Handler(socketserver.StreamRequestHandler):
    server: "_Server"

    def handle(self):
        fake = self.server.fake
        fake.connections += 1

        if fake.silent:
            fake.release.wait(timeout=10)
            return

        try:
            if fake.trickle:
                self._trickle(fake)
            else:
                self._serve(fake)
        except OSError:
            # Client hung up early; that is allowed
            pass

    def _write(self, text):
        self.wfile.write(text.encode("ascii"))
        self.wfile.flush()

    def _trickle(self, fake):
        for _ in range(fake.trickle):
            if fake.release.wait(timeout=fake.trickle_interval):
                return
            self.wfile.write(b"x")
            self.wfile.flush()

    def _serve(self, fake):
        while True:
            raw = self.rfile.readline()
            if not raw:
                return
            fake.received.append(raw)
            parts = raw.decode("ascii").rstrip("\r\n").split()
            if not parts:
                self._write("ERROR\r\n")
                continue

            command = parts[0]
            if command == "quit":
                return
            if command == "stats":
                for name, value in fake.stats:
                    self._write(f"STAT {name} {value}\r\n")
                self._write("END\r\n")
            elif command == "set" and len(parts) == 5:
                data = self.rfile.readline()
                fake.received.append(data)
                key, flags = parts[1], parts[2]
                fake.store[key] = (flags, data.decode("ascii").rstrip("\r\n"))
                self._write("STORED\r\n")
            elif command == "get" and len(parts) == 2:
                key = parts[1]
                if key in fake.store:
                    flags, value = fake.store[key]
                    if fake.corrupt_get:
                        value = "x" * len(value)
                    self._write(f"VALUE {key} {flags} {len(value)}\r\n{value}\r\n")
                self._write("END\r\n")
            else:
                self._write("ERROR\r\n")


class _Server(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True


class FakeMemcached:
    """Threaded fake memcached bound to 127.0.0.1 on a free port."""

    def __init__(self, stats=None):
        self.stats = list(stats if stats is not None else DEFAULT_STATS)
        self.silent = False
        self.corrupt_get = False
        self.trickle = 0
        self.trickle_interval = 0.05
        self.store = {}
        self.received = []
        self.connections = 0
        self.release = threading.Event()
        self._server = _Server(("127.0.0.1", 0), _Handler)
        self._server.fake = self
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def host(self):
        return "127.0.0.1"

    @property
    def port(self):
        return self._server.server_address[1]

    def start(self):
        self._thread.start()

    def stop(self):
        self.release.set()
        self._server.shutdown()
        self._server.server_close()
