import io
from contextlib import contextmanager

from flask import Response
from werkzeug.datastructures import Headers


class ResponseSink:
    """Destination for a served resource: a header set and a byte stream.

    Subclasses must override ``open_output`` to return a context manager
    yielding a writable binary stream that is closed when the block exits.
    """

    def __init__(self, headers=None):
        self.headers = Headers(headers)

    def open_output(self):
        raise NotImplementedError(
            f"{type(self).__name__} must override open_output()")


class BufferedSink(ResponseSink):
    """Collects the body in memory so it can be turned into a Flask response.

    Nothing reaches the client until ``to_response`` is called, which lets the
    caller discard the sink when serving fails.
    """

    def __init__(self, headers=None):
        super().__init__(headers)
        self.body = b""

    @contextmanager
    def open_output(self):
        buffer = io.BytesIO()
        try:
            yield buffer
        finally:
            self.body = buffer.getvalue()
            buffer.close()

    def to_response(self, status=200):
        """Builds a Flask ``Response`` carrying the collected headers and body."""
        response = Response(self.body, status=status)
        # Our headers replace Flask's defaults.
        response.headers.pop("Content-Type", None)
        response.headers.pop("Content-Length", None)
        response.headers.extend(self.headers)
        return response


class StreamSink(ResponseSink):
    """Writes the body straight to an already-open binary stream."""

    def __init__(self, stream, headers=None):
        super().__init__(headers)
        self.stream = stream

    @contextmanager
    def open_output(self):
        try:
            yield self.stream
        finally:
            self.stream.close()
