from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session


def next_document_number(db: Session, column, prefix: str, on_date: date) -> str:
    """Next ``PREFIX-YYYYMMDD-NNNNNN`` number for ``column`` on ``on_date``.

    Runs inside the caller's transaction; the column is unique, so a
    concurrent writer that picks the same number fails on insert.
    """
    stem = f"{prefix}-{on_date.strftime('%Y%m%d')}-"
    last = db.execute(
        select(column).where(column.like(f"{stem}%")).order_by(column.desc()).limit(1)
    ).scalar()

    sequence = 1
    if last:
        sequence = int(last.rsplit("-", 1)[1]) + 1
    return f"{stem}{sequence:06d}"
