"""
Public interfaces of repo-upgrader.
"""

from .api import API_TOKEN_SECTION, PackageUpgrader, mask_token

__all__ = [
    "API_TOKEN_SECTION",
    "PackageUpgrader",
    "mask_token",
]
