from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.core.dates import month_bounds
from backoffice.services.report_service import monthly_sales_totals, validate_period
from backoffice.services.sales_service import list_sales

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SALES_COLUMNS = (
    "Sale ID",
    "Date",
    "Product",
    "Quantity",
    "Bottle Size",
    "Unit Price",
    "Total",
)


def _write_header(worksheet, headers):
    worksheet.append(list(headers))
    for cell in worksheet[1]:
        cell.font = Font(bold=True)
    worksheet.freeze_panes = "A2"


def _naive(value):
    # openpyxl cannot store tz-aware datetimes
    if value is not None and getattr(value, "tzinfo", None) is not None:
        return value.replace(tzinfo=None)
    return value


def build_sales_workbook(db: Session, year: int | None = None) -> Workbook:
    currency = get_settings().CURRENCY
    start = end = None
    if year is not None:
        year, _ = validate_period(year)
        start, end = month_bounds(year)

    workbook = Workbook()
    sales_sheet = workbook.active
    sales_sheet.title = "Sales"
    _write_header(sales_sheet, SALES_COLUMNS)

    grand_total = 0.0
    for sale in list_sales(db, start=start, end=end):
        sales_sheet.append(
            [
                sale["id"],
                _naive(sale["sale_date"]),
                sale["product_name"],
                sale["quantity"],
                sale["bottle_size"] or "",
                sale["unit_price"],
                sale["total"],
            ]
        )
        grand_total += sale["total"]
    sales_sheet.append([])
    sales_sheet.append(["", "", "", "", "", "Total ({})".format(currency), round(grand_total, 2)])

    if year is not None:
        monthly_sheet = workbook.create_sheet("Monthly Totals")
        _write_header(monthly_sheet, ("Month", "Total ({})".format(currency)))
        for entry in monthly_sales_totals(db, year):
            monthly_sheet.append([entry["month_name"], entry["total"]])

    return workbook


def workbook_bytes(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


__all__ = ["SALES_COLUMNS", "XLSX_MEDIA_TYPE", "build_sales_workbook", "workbook_bytes"]
