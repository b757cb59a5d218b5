# Models package init
"""
Importing this package registers every table on Base.metadata, which
Database.create_all() and Alembic rely on.
"""

from cardactivation.models.activation import Activation
from cardactivation.models.admin import AdminPrincipal
from cardactivation.models.fee import FEE_LABELS, FeeLineItem

__all__ = ["Activation", "AdminPrincipal", "FeeLineItem", "FEE_LABELS"]
