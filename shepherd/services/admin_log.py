"""
services/admin_log.py

관리 행위 로그 기록 / 조회 서비스.

이 파일은 역할 승격·강등, 회원 일괄 삭제, 시트 가져오기 같은
주요 관리 행위를 AdminActionLog 테이블에 기록하는 역할을 담당한다.

라우터 또는 서비스 계층에서 호출되며,
로그 기록 자체는 DB에만 영향을 주고
비즈니스 흐름에는 개입하지 않는다.

설계 원칙:
- 로그 기록 실패가 주 기능을 방해하지 않도록 단순화
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계

"""

from sqlalchemy import select, desc
from sqlalchemy.orm import Session, aliased

from shepherd.models.admin_log import AdminActionLog, AdminAction
from shepherd.models.member import Member
from shepherd.models.user import User


"""
관리 행위 로그 기록 함수

- actor_id         : 행위를 수행한 사용자 ID
- action           : 수행된 관리 행위 유형
- target_member_id : 행위 대상 회원 ID (선택)
- before_role      : 변경 전 역할 (선택)
- after_role       : 변경 후 역할 (선택)
- detail           : 부가 설명 (선택)

NOTE:
- db.commit()은 호출 측(라우터)에서 수행

"""
def write_admin_log(
    db: Session,
    *,
    actor_id,
    action: AdminAction,
    target_member_id=None,
    before_role=None,
    after_role=None,
    detail=None,
):
    log = AdminActionLog(
        actor_id=actor_id,
        action=action,
        target_member_id=target_member_id,
        before_role=before_role,
        after_role=after_role,
        detail=detail[:500] if detail else None,
    )
    db.add(log)
    return log


def list_admin_logs(db: Session, limit: int = 50) -> list[dict]:
    Actor = aliased(User)
    Target = aliased(Member)

    rows = db.execute(
        select(AdminActionLog, Actor, Target)
        .outerjoin(Actor, Actor.id == AdminActionLog.actor_id)
        .outerjoin(Target, Target.id == AdminActionLog.target_member_id)
        .order_by(desc(AdminActionLog.created_at))
        .limit(limit)
    ).all()

    result = []
    for log, actor, target in rows:
        result.append(
            {
                "id": str(log.id),
                "created_at": log.created_at.isoformat(),
                "action": log.action.value,
                "before_role": log.before_role,
                "after_role": log.after_role,
                "detail": log.detail,
                "actor": (
                    {"id": str(actor.id), "email": actor.email, "role": actor.role.value}
                    if actor
                    else None
                ),
                "target": (
                    {"id": str(target.id), "name": target.full_name, "role": target.role.value}
                    if target
                    else None
                ),
            }
        )
    return result
