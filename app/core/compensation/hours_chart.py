"""Hours chart data for the monthly summary view.

The incident bars fold the night-shift hours back in while the night bars are
listed as well, so night hours appear twice. This is presentation only and is
never used for money.
"""

from app.core.models import HoursChartItem, MonthHours

CHART_COLORS: dict[str, str] = {
    "Weekday On-Call": "#3b82f6",
    "Weekend On-Call": "#93c5fd",
    "Weekday Incident": "#dc2626",
    "Weekend Incident": "#fca5a5",
    "Night Shift Incident": "#9f1239",
    "Weekend Night": "#f43f5e",
}


def build_hours_chart(hours: MonthHours, include_empty: bool = False) -> list[HoursChartItem]:
    values = {
        "Weekday On-Call": hours.weekday_oncall,
        "Weekend On-Call": hours.weekend_oncall,
        "Weekday Incident": hours.weekday_incident + hours.weekday_night_incident,
        "Weekend Incident": hours.weekend_incident + hours.weekend_night_incident,
        "Night Shift Incident": hours.weekday_night_incident,
        "Weekend Night": hours.weekend_night_incident,
    }
    return [
        HoursChartItem(name=name, hours=round(value, 2), color=CHART_COLORS[name])
        for name, value in values.items()
        if include_empty or value > 0
    ]
