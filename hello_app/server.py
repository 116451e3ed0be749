import errno
import logging
import signal
import socket
import threading

from werkzeug.serving import (
    LISTEN_QUEUE,
    BaseWSGIServer,
    get_sockaddr,
    make_server,
    select_address_family,
)

from . import config
from .app import app

LOG = logging.getLogger(__name__)


class BindError(OSError):
    """The listening socket could not be acquired."""

    def __init__(self, host: str, port: int, error: OSError):
        super().__init__(error.errno, error.strerror or str(error))
        self.host = host
        self.port = port
        self.error = error

    def __str__(self):
        return f"cannot listen on {self.host}:{self.port}: {self.strerror}"


def _listen(host: str, port: int) -> socket.socket:
    if not 0 <= port <= 65535:
        raise BindError(host, port, OSError(errno.EINVAL, f"port {port} out of range"))
    try:
        family = select_address_family(host, port)
        sock = socket.socket(family, socket.SOCK_STREAM)
    except OSError as e:
        raise BindError(host, port, e) from e
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(get_sockaddr(host, port, family))
        sock.listen(LISTEN_QUEUE)
    except OSError as e:
        sock.close()
        raise BindError(host, port, e) from e
    return sock


def create_server(host: str = config.HOST, port: int = config.PORT) -> BaseWSGIServer:
    """Bind the listening socket and wrap it in a threaded WSGI server.

    Raises BindError when the address is taken, not permitted or does not
    resolve. Port 0 binds an ephemeral port, read it back from ``server.port``.
    """
    sock = _listen(host, port)
    try:
        # the server works on a duplicate of the descriptor
        server = make_server(host, port, app, threaded=True, fd=sock.fileno())
    finally:
        sock.close()
    return server


def _interrupt(signum, frame):
    raise KeyboardInterrupt


def run(host: str = config.HOST, port: int = config.PORT):
    server = create_server(host, port)
    if threading.current_thread() is threading.main_thread():
        # PID 1 in a container ignores SIGTERM without a handler
        signal.signal(signal.SIGTERM, _interrupt)
    LOG.info("Listening on http://%s:%d", host, server.port)
    # returns on KeyboardInterrupt, closing the socket
    server.serve_forever()
    LOG.info("Stopped serving on port %d", server.port)
