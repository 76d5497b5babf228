"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Profile and ActivationCode are the only shared mutable rows; Sheet is append-only

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from app.models.profile import Profile  # noqa: F401
from app.models.activation_code import ActivationCode  # noqa: F401
from app.models.sheet import Sheet  # noqa: F401
