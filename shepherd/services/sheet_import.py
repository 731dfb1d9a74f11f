"""
services/sheet_import.py

스프레드시트 회원 명부 가져오기(Import Normalizer).

헤더 행을 먼저 읽어 열 이름으로 필드를 찾기 때문에
시트마다 열 순서/이름이 달라도 가져올 수 있다.

열 매핑 (대소문자 무시, 부분 일치, 먼저 찾은 열 사용, 없으면 -1):
- first_name  : "first name", "firstname"
- last_name   : "surname", "last name", "lastname"
- middle_name : "middle name", "middlename"
- phone       : "contact", "phone", "mobile", "tel"
- birthday    : "date of birth", "birthday", "dob", "birth"
- camp        : "camp"
- member_type : "new or old", "member type", "type", "status"
- region / residence / guardian / email

행 처리 규칙:
- 이름(성/이름)이 모두 비어 있으면 건너뜀
- member_type 셀로 역할 분류 후, camp 셀에 leader/shepherd 키워드가 있으면
  역할을 덮어쓰고 캠프 이름에서 키워드 제거
- 캠프는 이름으로 찾거나 생성 (한 번의 가져오기 안에서 캐시)
- 이메일 → 전화번호 순서로 기존 회원을 찾아 갱신, 없으면 생성
- Leader 행이면 해당 캠프의 leader_id 를 이 회원으로 지정 (마지막 행 우선)

진행 상황:
- 10행마다 {current, total, status, message} 를 progress 슬롯에 기록하고 커밋
- 성공/실패와 무관하게 항상 completed 또는 error 상태로 종료

NOTE:
- 행 단위 savepoint 로 처리하므로 한 행의 실패가 다른 행에 영향을 주지 않음
- 진행 상황을 폴링하는 쪽에서 보이도록 이 서비스는 중간 커밋을 수행함
- 역할이 Leader/Shepherd 로 바뀌면 행의 savepoint 안에서 User 계정을 동기화
  (이메일이 없는 승격 등 실패는 행 에러로 모으고 해당 행은 롤백)
- 강등으로 삭제된 계정의 외부 identity 삭제와 관리자 로그는 호출 측(라우터)에서 수행

"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from shepherd.models.admin_log import AdminAction
from shepherd.models.camp import Camp
from shepherd.models.member import Member, MemberRole, MemberStatus
from shepherd.services.app_settings import ImportProgress, write_progress
from shepherd.services.identity import IdentityProvider
from shepherd.services.roles import sync_staff_account, StaffSyncResult

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10

COLUMN_SYNONYMS = {
    "first_name": ("first name", "firstname"),
    "last_name": ("surname", "last name", "lastname"),
    "middle_name": ("middle name", "middlename"),
    "phone": ("contact", "phone", "mobile", "tel"),
    "birthday": ("date of birth", "birthday", "dob", "birth"),
    "camp": ("camp",),
    "member_type": ("new or old", "member type", "type", "status"),
    "region": ("region",),
    "residence": ("residence", "address", "location"),
    "guardian": ("guardian", "parent", "next of kin"),
    "email": ("email",),
}

# US 형식(월/일)을 먼저 시도
BIRTHDAY_PATTERNS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)

ROLE_KEYWORDS = (
    ("new", MemberRole.NEW_CONVERT),
    ("old", MemberRole.MEMBER),
    ("member", MemberRole.MEMBER),
    ("leader", MemberRole.LEADER),
    ("shepherd", MemberRole.SHEPHERD),
    ("guest", MemberRole.GUEST),
)

CAMP_ROLE_KEYWORDS = (
    ("leader", MemberRole.LEADER),
    ("shepherd", MemberRole.SHEPHERD),
)


@dataclass
class ParsedRow:
    first_name: str
    last_name: str
    middle_name: str | None
    email: str | None
    phone: str | None
    role: MemberRole
    camp_name: str | None
    birthday: date | None
    region: str | None
    residence: str | None
    guardian: str | None


@dataclass
class RoleChange:
    member_id: uuid.UUID
    action: AdminAction
    before_role: MemberRole | None
    after_role: MemberRole


@dataclass
class ImportResult:
    success: bool
    synced_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    message: str = ""
    column_mapping: dict[str, int] = field(default_factory=dict)
    found_headers: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    # 커밋 후 라우터에서 관리자 로그 / 외부 identity 삭제에 사용
    role_changes: list[RoleChange] = field(default_factory=list)
    removed_user_ids: list[uuid.UUID] = field(default_factory=list)


class ProgressReporter:
    """progress 슬롯에 기록 후 커밋 (폴링하는 다른 요청에서 바로 보이도록)"""

    def __init__(self, db: Session):
        self.db = db

    def __call__(self, current: int, total: int, status: str, message: str) -> None:
        write_progress(self.db, ImportProgress(current, total, status, message))
        self.db.commit()


class CampResolver:
    """캠프 이름 → id (한 번의 가져오기 동안 캐시)"""

    def __init__(self, db: Session):
        self.db = db
        self.cache: dict[str, uuid.UUID] = {}

    def resolve(self, name: str | None) -> uuid.UUID | None:
        if not name:
            return None
        key = name.strip()
        if key in self.cache:
            return self.cache[key]

        camp = self.db.scalar(select(Camp).where(Camp.name == key).limit(1))
        if camp is None:
            with self.db.begin_nested():
                camp = Camp(name=key)
                self.db.add(camp)
            logger.info("Created camp %r during import", key)

        self.cache[key] = camp.id
        return camp.id


def find_column(headers: list[str], *terms: str) -> int:
    lowered = [(h or "").lower().strip() for h in headers]
    for term in terms:
        for index, header in enumerate(lowered):
            if term in header:
                return index
    return -1


def resolve_columns(headers: list[str]) -> dict[str, int]:
    return {name: find_column(headers, *terms) for name, terms in COLUMN_SYNONYMS.items()}


def classify_role(member_type: str) -> MemberRole:
    lowered = (member_type or "").lower()
    for keyword, role in ROLE_KEYWORDS:
        if keyword in lowered:
            return role
    return MemberRole.MEMBER


def split_camp_cell(camp_cell: str) -> tuple[str, MemberRole | None]:
    for keyword, role in CAMP_ROLE_KEYWORDS:
        if keyword in camp_cell.lower():
            stripped = re.sub(keyword, "", camp_cell, count=1, flags=re.IGNORECASE)
            return " ".join(stripped.split()), role
    return camp_cell.strip(), None


def parse_birthday(raw: str) -> date | None:
    value = (raw or "").strip()
    if not value:
        return None
    for fmt in BIRTHDAY_PATTERNS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def clean_phone(raw: str) -> str:
    return re.sub(r"[^\d+]", "", raw or "")


def parse_row(row: list, mapping: dict[str, int]) -> ParsedRow | None:
    def value(column: str) -> str:
        index = mapping.get(column, -1)
        if index < 0 or index >= len(row) or row[index] is None:
            return ""
        return str(row[index]).strip()

    first_name = value("first_name")
    last_name = value("last_name")
    if not first_name and not last_name:
        return None

    role = classify_role(value("member_type"))
    camp_name, camp_role = split_camp_cell(value("camp"))
    if camp_role is not None:
        role = camp_role

    return ParsedRow(
        first_name=first_name or "Unknown",
        last_name=last_name or "Unknown",
        middle_name=value("middle_name") or None,
        email=value("email") or None,
        phone=clean_phone(value("phone")) or None,
        role=role,
        camp_name=camp_name or None,
        birthday=parse_birthday(value("birthday")),
        region=value("region") or None,
        residence=value("residence") or None,
        guardian=value("guardian") or None,
    )


def find_existing_member(db: Session, email: str | None, phone: str | None) -> Member | None:
    member = None
    if email:
        member = db.scalar(select(Member).where(func.lower(Member.email) == email.lower()).limit(1))
    if member is None and phone:
        member = db.scalar(select(Member).where(Member.phone == phone).order_by(Member.created_at).limit(1))
    return member


"""
회원 upsert + 계정 동기화

- 반환: (회원, 변경 전 역할, 계정 동기화 결과)
- Leader/Shepherd 승격에 이메일이 없으면 ValueError (호출 측 savepoint 롤백)

"""

def upsert_member(
    db: Session,
    parsed: ParsedRow,
    camp_id: uuid.UUID | None,
    identity: IdentityProvider,
) -> tuple[Member, MemberRole | None, StaffSyncResult]:
    member = find_existing_member(db, parsed.email, parsed.phone)
    before_role = member.role if member is not None else None

    if member is None:
        member = Member(
            first_name=parsed.first_name,
            middle_name=parsed.middle_name,
            last_name=parsed.last_name,
            email=parsed.email,
            phone=parsed.phone,
            role=parsed.role,
            status=MemberStatus.ACTIVE,
            camp_id=camp_id,
            birthday=parsed.birthday,
            region=parsed.region,
            residence=parsed.residence,
            guardian=parsed.guardian,
        )
        db.add(member)
    else:
        member.role = parsed.role
        member.status = MemberStatus.ACTIVE
        if camp_id is not None:
            member.camp_id = camp_id
        # 비어 있는 셀은 기존 값을 유지
        for key in ("first_name", "last_name", "middle_name", "email", "phone", "birthday", "region", "residence", "guardian"):
            new_value = getattr(parsed, key)
            if new_value is not None:
                setattr(member, key, new_value)
    db.flush()

    sync = sync_staff_account(db, member, before_role, identity)

    if parsed.role == MemberRole.LEADER and camp_id is not None:
        camp = db.get(Camp, camp_id)
        camp.leader_id = member.id
        db.flush()
    return member, before_role, sync


def _summary(synced: int, skipped: int, errors: int) -> str:
    message = f"Successfully synced {synced} members."
    if skipped:
        message += f" Skipped {skipped} rows."
    if errors:
        message += f" {errors} errors."
    return message


"""
스프레드시트 가져오기 실행

- header_row : 헤더 행 (열 이름 목록)
- rows       : 데이터 행 목록 (헤더 제외)
- progress   : (current, total, status, message) 콜백. 기본값은 DB progress 슬롯
- identity   : Leader/Shepherd 계정 생성용. 기본값은 설정 기반 클라이언트

반환: ImportResult (예외를 밖으로 던지지 않음)

"""

def import_from_spreadsheet(
    db: Session,
    header_row: list,
    rows: list[list],
    progress=None,
    identity: IdentityProvider | None = None,
) -> ImportResult:
    progress = progress or ProgressReporter(db)
    identity = identity or IdentityProvider.from_settings()
    headers = [str(h).strip() if h is not None else "" for h in header_row]
    mapping = resolve_columns(headers)

    if mapping["first_name"] == -1 and mapping["last_name"] == -1:
        message = (
            f"Could not find name columns. Found headers: {', '.join(headers)}. "
            'Expected "First Name" or "Surname" columns.'
        )
        progress(0, 0, "error", message)
        return ImportResult(success=False, message=message, column_mapping=mapping, found_headers=headers)

    total = len(rows)
    result = ImportResult(success=True, column_mapping=mapping, found_headers=headers)

    try:
        progress(0, total, "running", f"Processing {total} members...")
        camps = CampResolver(db)

        for index, row in enumerate(rows):
            if index and index % PROGRESS_EVERY == 0:
                progress(index, total, "running", f"Processing member {index + 1} of {total}...")

            parsed = parse_row(row, mapping)
            if parsed is None:
                result.skipped_count += 1
                continue

            try:
                camp_id = camps.resolve(parsed.camp_name)
                with db.begin_nested():
                    member, before_role, sync = upsert_member(db, parsed, camp_id, identity)
            except Exception as exc:
                # 헤더가 1행이므로 데이터 행 번호는 +2
                logger.warning("Import row %s failed: %s", index + 2, exc)
                result.errors.append(f"Row {index + 2}: {type(exc).__name__}: {exc}")
                continue

            result.synced_count += 1
            if sync.action is not None:
                result.role_changes.append(RoleChange(member.id, sync.action, before_role, member.role))
            if sync.removed_user_id is not None:
                result.removed_user_ids.append(sync.removed_user_id)

        result.error_count = len(result.errors)
        result.message = _summary(result.synced_count, result.skipped_count, result.error_count)
        progress(total, total, "completed", result.message)

    except Exception as exc:
        logger.exception("Spreadsheet import failed")
        db.rollback()
        message = f"Import failed: {type(exc).__name__}"
        progress(0, 0, "error", message)
        result.success = False
        # 롤백된 행의 계정이 섞일 수 있으므로 후처리 대상에서 제외
        result.role_changes.clear()
        result.removed_user_ids.clear()
        result.error_count = len(result.errors)
        result.message = message

    return result


def import_rows(
    db: Session,
    all_rows: list[list],
    progress=None,
    identity: IdentityProvider | None = None,
) -> ImportResult:
    """헤더 + 데이터 행이 합쳐진 원본 (시트 API / 업로드 파일) 을 가져오기"""
    progress = progress or ProgressReporter(db)
    if len(all_rows) < 2:
        message = "No data found in sheet (needs header + at least 1 row)."
        progress(0, 0, "error", message)
        return ImportResult(success=False, message=message)
    return import_from_spreadsheet(db, all_rows[0], all_rows[1:], progress=progress, identity=identity)
