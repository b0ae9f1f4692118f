# tasklic license engine

from tasklic.common.crypto import compute_checksum
from tasklic.common.decorators import requires_valid_license
from tasklic.server.license_manager import LicenseManager

__all__ = [
    "LicenseManager",
    "compute_checksum",
    "requires_valid_license",
]
