"""
Web middleware installing identity map scoping around requests.
"""

from .asgi import AsgiIdentityMapMiddleware
from .wsgi import IdentityMapMiddleware

__all__ = ["AsgiIdentityMapMiddleware", "IdentityMapMiddleware"]
