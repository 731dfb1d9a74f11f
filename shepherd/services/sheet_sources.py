"""
services/sheet_sources.py

회원 명부 스프레드시트 원본 읽기.

- .xlsx 업로드 : openpyxl 로 첫 번째 시트 읽기
- .csv 업로드  : csv 모듈 (UTF-8, BOM 허용)
- Google Sheets : Sheets v4 values API (API 키) 를 httpx 로 호출

모든 원본은 "문자열 2차원 목록(행 목록)" 으로 변환하여 반환한다.
첫 번째 행은 헤더로 사용된다.

"""

import csv
import datetime
import io
import logging
from urllib.parse import quote

import httpx
from openpyxl import load_workbook

from shepherd.core.config import settings

logger = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"


class SheetSourceError(Exception):
    pass


def _cell_text(value) -> str:
    if value is None:
        return ""
    # 전화번호가 숫자 셀로 저장된 경우 (551234567.0 → 551234567)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value).strip()


def rows_from_xlsx(content: bytes) -> list[list[str]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise SheetSourceError(f"Could not read spreadsheet: {type(exc).__name__}") from exc

    try:
        sheet = workbook.worksheets[0]
        rows = [[_cell_text(v) for v in row] for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    # 끝부분의 완전히 빈 행 제거
    while rows and not any(rows[-1]):
        rows.pop()
    return rows


def rows_from_csv(content: bytes) -> list[list[str]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise SheetSourceError("CSV file must be UTF-8 encoded") from exc
    return [[cell.strip() for cell in row] for row in csv.reader(io.StringIO(text)) if row]


def rows_from_upload(filename: str, content: bytes) -> list[list[str]]:
    name = (filename or "").lower()
    if name.endswith(".xlsx"):
        return rows_from_xlsx(content)
    if name.endswith(".csv"):
        return rows_from_csv(content)
    raise SheetSourceError("Unsupported file type. Upload a .xlsx or .csv file.")


def fetch_google_sheet(sheet_id: str, api_key: str | None = None, timeout: float | None = None) -> list[list[str]]:
    api_key = api_key or settings.GOOGLE_SHEETS_API_KEY
    if not sheet_id:
        raise SheetSourceError("Missing sheetId")
    if not api_key:
        raise SheetSourceError("Google Sheets is not configured. Set GOOGLE_SHEETS_API_KEY.")

    timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS
    try:
        with httpx.Client(timeout=timeout) as client:
            meta = client.get(
                f"{SHEETS_API_BASE}/{sheet_id}",
                params={"key": api_key, "fields": "sheets.properties.title"},
            )
            meta.raise_for_status()
            sheets = meta.json().get("sheets") or []
            if not sheets:
                raise SheetSourceError("Could not find any sheets in this spreadsheet.")
            title = sheets[0]["properties"]["title"]

            values = client.get(
                f"{SHEETS_API_BASE}/{sheet_id}/values/{quote(title + '!A1:Z')}",
                params={"key": api_key},
            )
            values.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.warning("Google Sheets returned %s for %s", exc.response.status_code, sheet_id)
        raise SheetSourceError(f"Google Sheets error ({exc.response.status_code})") from exc
    except httpx.HTTPError as exc:
        logger.warning("Google Sheets request failed for %s", sheet_id, exc_info=exc)
        raise SheetSourceError("Could not reach Google Sheets") from exc

    return [[_cell_text(v) for v in row] for row in values.json().get("values", [])]
