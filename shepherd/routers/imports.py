"""
imports.py

회원 명부 가져오기(Import) API.

주요 기능:
- .xlsx / .csv 파일 업로드 가져오기
- Google Sheets (sheetId) 가져오기
- 진행 상황 조회 (프론트엔드 폴링용)

설계 원칙:
- Admin 전용 (진행 상황 조회는 로그인한 사용자 모두)
- 원본 읽기 실패(파일 형식 / 외부 API)는 예외 대신 {success: false, message} 로 응답하고
  진행 상황도 error 상태로 남김
- 행 단위 실패는 결과의 errors 에 모아서 반환 (가져오기는 계속 진행)
- 가져오기 결과는 관리자 로그(IMPORT_MEMBERS)로 기록
- 가져오기로 바뀐 Leader/Shepherd 역할은 PROMOTE/DEMOTE 로그를 남기고,
  강등으로 삭제된 계정의 외부 identity 는 커밋 후 삭제

관련 파일:
- shepherd.services.sheet_sources  : 원본(xlsx/csv/Google Sheets) → 행 목록
- shepherd.services.sheet_import   : 열 매핑 / 회원 upsert / 진행 상황 기록
- shepherd.services.app_settings   : 진행 상황 슬롯

"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from shepherd.core.deps import get_db, get_current_user, get_current_admin, get_identity_provider
from shepherd.core.errors import db_error
from shepherd.models.admin_log import AdminAction
from shepherd.models.user import User
from shepherd.schemas.imports import GoogleSheetImportRequest, ImportResultResponse
from shepherd.services.admin_log import write_admin_log
from shepherd.services.app_settings import read_progress
from shepherd.services.identity import IdentityProvider
from shepherd.services.sheet_import import ImportResult, ProgressReporter, import_rows
from shepherd.services.sheet_sources import SheetSourceError, rows_from_upload, fetch_google_sheet

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports", tags=["imports"])


def _source_failed(db: Session, exc: SheetSourceError) -> dict:
    message = str(exc)
    ProgressReporter(db)(0, 0, "error", message)
    return {"message": message, "data": ImportResultResponse(success=False, message=message).model_dump()}


def _finish(db: Session, admin: User, result: ImportResult, source: str, identity: IdentityProvider) -> dict:
    try:
        for change in result.role_changes:
            write_admin_log(
                db,
                actor_id=admin.id,
                action=change.action,
                target_member_id=change.member_id,
                before_role=change.before_role.value if change.before_role else None,
                after_role=change.after_role.value,
                detail=f"import:{source}",
            )
        write_admin_log(
            db,
            actor_id=admin.id,
            action=AdminAction.IMPORT_MEMBERS,
            detail=f"{source}: {result.message}",
        )
        db.commit()
    except Exception as e:
        db.rollback()
        raise db_error(e)

    for user_id in result.removed_user_ids:
        identity.delete_identity(user_id)

    logger.info("Import from %s finished: %s", source, result.message)
    return {"message": result.message, "data": ImportResultResponse.model_validate(result).model_dump()}


"""
파일 업로드 가져오기 API

- multipart/form-data 의 file 필드 (.xlsx 또는 .csv)
- 첫 번째 행은 헤더

"""
@router.post("/upload")
def import_upload(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    try:
        rows = rows_from_upload(file.filename, file.file.read())
    except SheetSourceError as e:
        return _source_failed(db, e)

    result = import_rows(db, rows, identity=identity)
    return _finish(db, current_admin, result, file.filename or "upload", identity)


@router.post("/google")
def import_google_sheet(
    data: GoogleSheetImportRequest,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    try:
        rows = fetch_google_sheet(data.sheet_id)
    except SheetSourceError as e:
        return _source_failed(db, e)

    result = import_rows(db, rows, identity=identity)
    return _finish(db, current_admin, result, f"google:{data.sheet_id}", identity)


# 진행 상황이 없으면 idle
@router.get("/progress")
def import_progress(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    progress = read_progress(db)
    if progress is None:
        progress = {"current": 0, "total": 0, "status": "idle", "message": ""}
    return {"data": progress}
