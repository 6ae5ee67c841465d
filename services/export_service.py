# services/export_service.py
import io
import logging
import re

import pandas as pd
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from constants.activity import ActivityAction, ActivityResource
from constants.work_item import EXPORT_COLUMNS
from services.activity_service import ActivityService
from utils.datetime_helpers import utcnow
from utils.exceptions import ValidationError
from utils.permissions import PermissionScope
from utils.work_items import export_stats, flatten_for_export, rows_to_csv

logger = logging.getLogger(__name__)

SHEET_NAME = "Work Items"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIMETYPE = "text/csv; charset=utf-8"
EXPORT_FORMATS = ("xlsx", "csv")

COLUMN_WIDTHS = {
    "Type": 15,
    "ID": 15,
    "Title": 50,
    "Flag Name": 20,
    "Remarks": 40,
    "Parent": 40,
    "Hyperlink": 40,
    "Created Date": 15,
    "Updated Date": 15,
}
HEADER_FILL = PatternFill(start_color="354A5F", end_color="354A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\r\n]+')


def _safe_part(value: str) -> str:
    return _UNSAFE_FILENAME_RE.sub("_", (value or "").strip()) or "release"


def export_filename(release, ext: str) -> str:
    """{application}_{release}_WorkItems_{YYYY-MM-DD}.{ext}"""
    return (
        f"{_safe_part(release.application_name)}_{_safe_part(release.title)}"
        f"_WorkItems_{utcnow().strftime('%Y-%m-%d')}.{ext}"
    )


def build_xlsx(rows) -> bytes:
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        ws = writer.sheets[SHEET_NAME]
        for idx, column in enumerate(EXPORT_COLUMNS, 1):
            ws.column_dimensions[get_column_letter(idx)].width = COLUMN_WIDTHS.get(column, 20)
            header = ws.cell(row=1, column=idx)
            header.fill = HEADER_FILL
            header.font = HEADER_FONT
        ws.freeze_panes = "A2"
    return buffer.getvalue()


class ExportService:

    @staticmethod
    def export(actor: PermissionScope, release, fmt: str):
        """
        返回 (内容 bytes, 文件名, mimetype)
        """
        fmt = (fmt or "xlsx").lower()
        if fmt not in EXPORT_FORMATS:
            raise ValidationError(f"format must be one of {list(EXPORT_FORMATS)}")
        items = release.work_items or []
        if not items:
            raise ValidationError("No work items to export")

        rows = flatten_for_export(items)
        if fmt == "csv":
            content, mimetype = rows_to_csv(rows).encode("utf-8"), CSV_MIMETYPE
        else:
            content, mimetype = build_xlsx(rows), XLSX_MIMETYPE
        filename = export_filename(release, fmt)
        logger.info("release exported id=%s format=%s rows=%s", release.id, fmt, len(rows))
        ActivityService.log(actor, ActivityAction.RELEASE_EXPORTED, ActivityResource.RELEASE,
                            details=f"Exported {len(rows)} work items as {fmt}", resource_id=release.id,
                            application=release.application_name)
        return content, filename, mimetype

    @staticmethod
    def stats(release) -> dict:
        return export_stats(release.work_items or [])
