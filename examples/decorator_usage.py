"""Example usage of the license decorator.
"""

from __future__ import annotations

import asyncio

from tasklic import LicenseManager, requires_valid_license
from tasklic.common.exceptions import LicenseRequiredError

manager = LicenseManager()


# Example 1: Using decorator with a manager instance
@requires_valid_license(
    manager,
    "tenant-42",
    "https://tenant42.example.com",
    "Exporting reports requires an active license",
)
async def export_report() -> str:
    """Feature that only runs with a valid license."""
    return "Report exported"


# Example 2: Looking the manager up on the instance
class ReportService:
    def __init__(self, licenses: LicenseManager):
        self.licenses = licenses

    @requires_valid_license(
        "licenses", "tenant-42", "https://tenant42.example.com", raise_exception=False
    )
    async def schedule(self) -> str:
        """Returns None instead of raising when the license is not valid."""
        return "Report scheduled"


async def main() -> None:
    try:
        print(await export_report())
    except LicenseRequiredError as e:
        print(f"Error: {e}")

    result = await ReportService(manager).schedule()
    if result is None:
        print("Scheduling not available without license")
    else:
        print(result)

    manager.close()


if __name__ == "__main__":
    asyncio.run(main())
