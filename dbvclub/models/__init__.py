# Base.metadata에 모든 테이블을 등록하기 위한 import
from dbvclub.models.club import Club  # noqa: F401
from dbvclub.models.user import User, Role, DbvClass  # noqa: F401
from dbvclub.models.specialty import (  # noqa: F401
    Specialty,
    Requirement,
    RequirementType,
    RequirementStatus,
    UserSpecialty,
    UserSpecialtyStatus,
    UserRequirement,
)
from dbvclub.models.points import PointsHistory, PointsSource  # noqa: F401
from dbvclub.models.notification import Notification, NotificationType  # noqa: F401
