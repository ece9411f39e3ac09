"""Validators module - response validation.

The predicate library is re-exported here, so ``validators.status(200)``
and ``validators.and_(...)`` work directly on this package.
"""

from .engine import BUILTIN_VALIDATORS, Combinator, ValidationOutcome, Validator
from .predicates import *  # noqa: F401,F403
from .predicates import __all__ as _predicate_names
from .schema_check import check_schema, data_type, validate_schema

__all__ = [
    "BUILTIN_VALIDATORS",
    "Combinator",
    "ValidationOutcome",
    "Validator",
    "check_schema",
    "data_type",
    "validate_schema",
] + list(_predicate_names)
