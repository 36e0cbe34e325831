import logging
import mimetypes
import os
import shutil
from dataclasses import dataclass

from werkzeug.http import http_date

from .constants import (
    COPY_CHUNK_SIZE,
    DEFAULT_CACHE_CONTROL,
    DEFAULT_MIME_TYPES,
    HTTP_HEADER_CACHE_CONTROL,
    HTTP_HEADER_CONTENT_LENGTH,
    HTTP_HEADER_CONTENT_TYPE,
    HTTP_HEADER_ETAG,
    HTTP_HEADER_LAST_MODIFIED,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceDescriptor:
    """A single file under the resource root, described for one request.

    ``last_modified`` is in milliseconds since the epoch; 0 means unknown.
    """

    filename: str
    path: str
    length: int
    last_modified: int
    mimetype: str | None


def guess_host_mimetype(path):
    """Looks ``path`` up in the content-type table Flask uses for static files."""
    return mimetypes.guess_type(path)[0]


def extract_filename(relative_name):
    """Returns the part of ``relative_name`` after its last ``/``.

    This is the only traversal guard: directory segments are dropped, nothing
    else (``..``, backslashes, percent escapes) is interpreted.
    """
    index = relative_name.rfind("/")
    return relative_name if index < 0 else relative_name[index + 1:]


def resolve_mimetype(path, mimetype_lookup=guess_host_mimetype):
    """Determines the media type of ``path``.

    The host table is asked first, then the built-in extension map
    (case-insensitive). Returns None if neither knows the extension.
    """
    mimetype = mimetype_lookup(path)
    if mimetype:
        return mimetype
    ext_index = path.rfind(".")
    if ext_index == -1:
        return None
    return DEFAULT_MIME_TYPES.get(path[ext_index:].lower())


def is_readable_file(path):
    return os.path.isfile(path) and os.access(path, os.R_OK)


def describe_resource(root, filename, mimetype_lookup=guess_host_mimetype):
    """Builds the descriptor for ``filename`` under ``root``.

    Returns:
        ResourceDescriptor | None: None when the file is missing, unreadable,
        or is a directory.
    """
    path = os.path.join(root.path, filename)
    if not is_readable_file(path):
        logger.warning(
            "Error dispatching image resource response, %s not found.", path)
        return None
    try:
        stat = os.stat(path)
    except OSError as e:
        logger.warning("Error reading image resource %s: %s", path, e)
        return None
    return ResourceDescriptor(
        filename=filename,
        path=path,
        length=stat.st_size,
        last_modified=stat.st_mtime_ns // 1_000_000,
        mimetype=resolve_mimetype(path, mimetype_lookup),
    )


def compute_caching_headers(descriptor, existing_headers=None):
    """Computes the response headers for ``descriptor``.

    Args:
        descriptor (ResourceDescriptor): The file being served.
        existing_headers: Headers already present on the response; a
            Cache-Control value there is left alone.

    Returns:
        dict: Header name to value. Content-Type is omitted when the media
        type is unknown, ETag and Last-Modified when the timestamp is 0.
    """
    headers = {}
    if descriptor.mimetype:
        headers[HTTP_HEADER_CONTENT_TYPE] = descriptor.mimetype
    headers[HTTP_HEADER_CONTENT_LENGTH] = str(descriptor.length)
    if descriptor.last_modified != 0:
        headers[HTTP_HEADER_ETAG] = f'"{descriptor.last_modified}"'
        headers[HTTP_HEADER_LAST_MODIFIED] = http_date(
            descriptor.last_modified // 1000)
    if existing_headers is None or HTTP_HEADER_CACHE_CONTROL not in existing_headers:
        headers[HTTP_HEADER_CACHE_CONTROL] = DEFAULT_CACHE_CONTROL
    return headers


def write_resource_data(descriptor, sink):
    """Copies the file's bytes to the sink. Both streams are closed on exit."""
    with open(descriptor.path, "rb") as source, sink.open_output() as output:
        shutil.copyfileobj(source, output, COPY_CHUNK_SIZE)


def serve_resource(root, relative_name, sink, mimetype_lookup=guess_host_mimetype):
    """Serves one file from the resource root into ``sink``.

    Args:
        root (ResolvedRoot | None): The resolved resource directory.
        relative_name (str): The requested path; only its last segment is used.
        sink (ResponseSink): Receives the headers and the file bytes.
        mimetype_lookup (callable): The host content-type table.

    Returns:
        bool: True if the headers and the full body were written. On False
        nothing is written, except after an I/O failure mid-copy, where the
        headers and part of the body may already be in the sink.
    """
    filename = extract_filename(relative_name)
    logger.debug("Attempting to dispatch image resource: %s", filename)

    if root is None:
        logger.warning(
            "Unable to dispatch image resource %s, no image resource directory is configured.",
            filename,
        )
        return False

    descriptor = describe_resource(root, filename, mimetype_lookup)
    if descriptor is None:
        return False

    for name, value in compute_caching_headers(descriptor, sink.headers).items():
        sink.headers[name] = value

    try:
        write_resource_data(descriptor, sink)
    except OSError as e:
        logger.warning("Error dispatching image resource response: %s", e)
        return False
    return True
