"""Print-readiness checks base interface.

This module defines the protocol (interface) that all checks implement. Each
check inspects one aspect of a loaded document (fonts, bleed, ink coverage...)
and returns exactly one CheckResult.

Checks are stateless and must treat the document as read-only: the same
DocumentModel is shared by every check run against a file.

To implement a new check:

1. Create a new file in this directory (e.g., `my_check.py`)
2. Define a class that implements the PrintCheck protocol
3. Add a CheckId member and a display name in validation/config.py
4. Register an instance in ALL_CHECKS in registry.py

Example:
    ```python
    # checks/my_check.py
    from print_check.core.enums import CheckId
    from ..config import CHECK_NAMES
    from ..models import CheckResult

    class MyCheck:
        check_id = CheckId.MY_CHECK

        def validate(self, document, options) -> CheckResult:
            details = [...]
            return CheckResult.from_details(CHECK_NAMES[self.check_id], details, "summary")
    ```
"""

from __future__ import annotations

from typing import Protocol

from print_check.core.enums import CheckId
from print_check.document import DocumentModel
from ..models import CheckResult
from ..options import CheckOptions


class PrintCheck(Protocol):
    """Protocol defining the interface for checks.

    Use duck typing (Protocol) - no need to inherit from a base class.

    Attributes:
        check_id: Identifier used for selection and severity overrides.
    """

    check_id: CheckId

    def validate(self, document: DocumentModel, options: CheckOptions) -> CheckResult:
        """Run the check against one document.

        Args:
            document: Loaded, read-only document model.
            options: Resolved check options.

        Returns:
            One CheckResult whose status is the worst of its details.

        Raises:
            Any exception escaping a check is converted to a failing result by
            the registry, so checks do not need to guard against malformed PDFs
            beyond what the document accessors already do.
        """
        ...


__all__ = ["PrintCheck"]
