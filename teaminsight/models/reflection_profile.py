"""ReflectionProfile ORM - lecturer-defined scoring thresholds and persona addenda.

Invariants:
    - key is unique and immutable once sessions reference it
    - green_min and red_max feed score_to_color at confirm time
"""

from sqlalchemy import String, Text, Integer
from sqlalchemy.orm import Mapped, mapped_column

from teaminsight.core.policy import DEFAULT_GREEN_MIN, DEFAULT_RED_MAX, ProfileSnapshot
from teaminsight.db.base import Base


class ReflectionProfile(Base):
    __tablename__ = "reflection_profiles"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    controller_addendum: Mapped[str] = mapped_column(
        Text, nullable=False, default="",
    )
    evaluator_addendum: Mapped[str] = mapped_column(
        Text, nullable=False, default="",
    )
    green_min: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_GREEN_MIN,
    )
    red_max: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_RED_MAX,
    )

    def to_snapshot(self) -> ProfileSnapshot:
        """Frozen copy handed to oracle calls."""
        return ProfileSnapshot(
            key=self.key,
            title=self.title,
            controller_addendum=self.controller_addendum or "",
            evaluator_addendum=self.evaluator_addendum or "",
            green_min=DEFAULT_GREEN_MIN if self.green_min is None else self.green_min,
            red_max=DEFAULT_RED_MAX if self.red_max is None else self.red_max,
        )
