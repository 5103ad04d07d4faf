"""Models for shadowlink."""

from .plugins import PluginConfiguration
from .plugins import PluginOptions
from .profiles import FEATURE_FIELDS
from .profiles import Profile
from .profiles import ProfileIndex
from .profiles import SubscriptionStatus
from .profiles import apply_template

__all__ = [
    "FEATURE_FIELDS",
    "PluginConfiguration",
    "PluginOptions",
    "Profile",
    "ProfileIndex",
    "SubscriptionStatus",
    "apply_template",
]
