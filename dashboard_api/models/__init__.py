# SQLModel definitions - imported here to ensure metadata is populated for Alembic.
from .base import IntIdMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .payee import Payee  # noqa: F401
from .category import Category, CategorySite  # noqa: F401
from .site import Site  # noqa: F401
from .site_user import SiteUser  # noqa: F401
from .video import Video  # noqa: F401
from .reporting import HealthCheck, PremiereRevenueSummary, RevenueReport  # noqa: F401
