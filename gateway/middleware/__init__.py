"""HTTP middleware: request size limit and upload CORS headers.

Applied in main app; order matters (first added = outermost).
"""

from gateway.middleware.cors_headers import CORSHeadersMiddleware
from gateway.middleware.request_size_limit import RequestSizeLimitMiddleware

__all__ = ["CORSHeadersMiddleware", "RequestSizeLimitMiddleware"]
