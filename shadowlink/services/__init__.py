"""Services for shadowlink.

Public Interface:
    - ProfileService: Import, export and manage stored profiles
    - FallbackResolver: Persist parse results and link UDP fallbacks
"""

from .fallback_resolver import FallbackResolver
from .profile_service import ProfileService

__all__ = [
    "FallbackResolver",
    "ProfileService",
]
