import datetime

from fastapi import HTTPException, status


def validate_year_month(year: int, month: int) -> datetime.datetime:
    """
    Validate a year/month path pair.

    Returns the first instant of the month, raises HTTP 400 for an invalid month.
    """
    try:
        return datetime.datetime(year, month, 1)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid year or month",
        )
