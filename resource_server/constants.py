# Configuration key naming the image resource directory override
IMAGE_RESOURCE_DIR_PROPERTY = "IMAGE_RESOURCE_DIR"
# Subdirectory of the application base directory used when nothing is configured
DEFAULT_IMAGE_SUBDIR = "images"

HTTP_HEADER_CONTENT_TYPE = "Content-Type"
HTTP_HEADER_CONTENT_LENGTH = "Content-Length"
HTTP_HEADER_LAST_MODIFIED = "Last-Modified"
HTTP_HEADER_ETAG = "ETag"
HTTP_HEADER_CACHE_CONTROL = "Cache-Control"

DEFAULT_CACHE_CONTROL = "max-age=86400"
# Chunk size used when copying file bytes to the response sink
COPY_CHUNK_SIZE = 64 * 1024

# Fallback media types, keys are lower-case extensions
DEFAULT_MIME_TYPES = {
    ".gif": "image/gif",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".png": "image/png",
}

# Monitoring transport properties
DEFAULT_MONITORING_DIR_NAME = "monitoring"
DEFAULT_CONTROLLER_PROPERTIES_NAME = "controller.properties"
DEFAULT_STORAGE_URL = "http://localhost:8080/monitoring/storage"
DEFAULT_CHECK_URL = "http://localhost:8080/monitoring/check"
