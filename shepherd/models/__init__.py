# Base.metadata 에 모든 테이블을 등록하기 위한 import 모음
from shepherd.models.user import User, Role  # noqa: F401
from shepherd.models.member import Member, MemberRole, MemberStatus, Campus, Category  # noqa: F401
from shepherd.models.camp import Camp  # noqa: F401
from shepherd.models.event import Event, EventType, AttendanceRecord, AttendanceStatus  # noqa: F401
from shepherd.models.pastoral import (  # noqa: F401
    MemberAssignment,
    LeaderCampus,
    FollowUp,
    FollowUpType,
    FollowUpOutcome,
)
from shepherd.models.app_setting import AppSetting  # noqa: F401
from shepherd.models.admin_log import AdminActionLog, AdminAction  # noqa: F401
