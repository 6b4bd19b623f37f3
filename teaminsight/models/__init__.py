"""ORM Models - SQLAlchemy declarative models for reflection entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every ReflectionSession is scoped by team_id

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from teaminsight.models.team import Team  # noqa: F401
from teaminsight.models.reflection_session import ReflectionSession  # noqa: F401
from teaminsight.models.reflection_profile import ReflectionProfile  # noqa: F401
from teaminsight.models.reflection_settings import ReflectionSettings  # noqa: F401
