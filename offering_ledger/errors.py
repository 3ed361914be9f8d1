"""
Exceptions raised at the mutation boundary.

A raised mutation error always means the document was NOT changed.
"""

from typing import Optional


class MutationError(Exception):
    """Base exception for rejected ledger mutations."""
    pass


class InvalidRequestError(MutationError):
    """
    The request is structurally invalid (missing name, unknown category,
    a service slot that does not exist, ...).

    The message is meant to be shown to the user as-is.
    """
    pass


class LinkedDetailError(MutationError):
    """
    An institutional line created by personal-expense sync was edited
    or deleted directly. It must be changed from the personal side.
    """

    def __init__(
        self,
        category: str,
        line_name: str,
        source_category: Optional[str] = None,
    ):
        self.category = category
        self.line_name = line_name
        self.source_category = source_category
        where = f" in '{source_category}'" if source_category else ""
        super().__init__(
            f"'{line_name}' is linked to a personal expense{where}. "
            "Edit it from the personal expenses page instead."
        )
