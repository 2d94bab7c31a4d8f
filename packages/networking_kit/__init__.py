"""Public networking_kit API: JSON GET/POST helpers and multipart uploads."""

from .config import NetworkingSettings, load_settings
from .encoding import (
    encode_json_body,
    encode_query,
    join_url,
    render_value,
    validate_url,
)
from .errors import (
    DecodingError,
    GenericError,
    InvalidResponseCodeError,
    InvalidURLError,
    NetworkError,
    NetworkErrorKind,
    as_network_error,
)
from .executor import RequestExecutor
from .models import (
    Attachment,
    DocumentKind,
    Headers,
    MultipartResult,
    ParameterValue,
    Primitive,
    ProgressObserver,
    RequestParameters,
)
from .multipart import MultipartUploader, ProgressStream, build_parts
from .networking import Networking, NetworkingProtocol
from .streams import ResultStream, Subscription

__all__ = [
    "as_network_error",
    "Attachment",
    "build_parts",
    "DecodingError",
    "DocumentKind",
    "encode_json_body",
    "encode_query",
    "GenericError",
    "Headers",
    "InvalidResponseCodeError",
    "InvalidURLError",
    "join_url",
    "load_settings",
    "MultipartResult",
    "MultipartUploader",
    "NetworkError",
    "NetworkErrorKind",
    "Networking",
    "NetworkingProtocol",
    "NetworkingSettings",
    "ParameterValue",
    "Primitive",
    "ProgressObserver",
    "ProgressStream",
    "render_value",
    "RequestExecutor",
    "RequestParameters",
    "ResultStream",
    "Subscription",
    "validate_url",
]
