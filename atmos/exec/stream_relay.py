"""
Live relay of subprocess output to host streams.

Each relay copies one binary source to one destination on its own thread,
writing whatever bytes are available as soon as they arrive rather than
waiting for a newline.
"""

import codecs
import io
import logging
import threading
from typing import Any, Callable, IO, Optional


logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096

Transform = Callable[[Any], Any]


class RelayHandle:
    """Wait handle for a running relay."""

    def __init__(self, name: str):
        self.name = name
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        """
        Block until the source is exhausted and flushed to the destination.

        Raises:
            Any exception raised while copying, including transform errors
        """
        if self._thread is not None:
            self._thread.join(timeout)
        if self.error is not None:
            raise self.error


def _read_chunk(src: IO[bytes]) -> bytes:
    # read1 returns as soon as any data is available
    read1 = getattr(src, "read1", None)
    if read1 is not None:
        return read1(CHUNK_SIZE)
    return src.read(CHUNK_SIZE)


def _binary_sink(dest: IO) -> Optional[IO[bytes]]:
    """Byte stream underneath dest, or None for text-only streams like StringIO."""
    if not isinstance(dest, io.TextIOBase):
        return dest
    buffer = getattr(dest, "buffer", None)
    if buffer is None:
        return None
    # Pending text must land before the raw bytes
    dest.flush()
    return buffer


def _copy(src: IO[bytes], dest: IO, transform: Optional[Transform], handle: RelayHandle) -> None:
    decoder = None
    sink = _binary_sink(dest)
    if sink is None:
        sink = dest
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def emit(data):
        if not data:
            return
        if transform is not None:
            data = transform(data)
        sink.write(data)
        sink.flush()

    try:
        while True:
            chunk = _read_chunk(src)
            if not chunk:
                break
            emit(decoder.decode(chunk) if decoder else chunk)
        if decoder:
            emit(decoder.decode(b"", final=True))
    except Exception as e:
        logger.debug(f"Relay {handle.name} failed: {e}")
        handle.error = e
        # Keep draining so the producer never blocks on a full pipe
        try:
            while _read_chunk(src):
                pass
        except (OSError, ValueError):
            pass


def pipe_stream(src: IO[bytes], dest: IO, transform: Optional[Transform] = None,
                name: str = "relay") -> RelayHandle:
    """
    Start copying src to dest in the background.

    Args:
        src: Binary readable stream, e.g. a subprocess pipe
        dest: Writable stream; bytes are written unchanged to binary streams
              and to the buffer underneath text streams such as sys.stdout.
              Only text-only streams (no buffer) receive UTF-8 decoded data
        transform: Optional function applied to each chunk before writing,
                   receiving bytes or str to match what dest is written
        name: Label used in log messages

    Returns:
        RelayHandle to join once the source has been closed
    """
    handle = RelayHandle(name)
    thread = threading.Thread(
        target=_copy,
        args=(src, dest, transform, handle),
        name=f"atmos-{name}",
    )
    thread.daemon = True
    handle._thread = thread
    thread.start()
    return handle
