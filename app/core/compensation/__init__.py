"""
Compensation calculations: hour equivalents, money per month and per event.
"""

from .event_summary import EventCompensationService
from .facade import CompensationCalculatorFacade
from .hours_chart import build_hours_chart
from .service import CompensationService, precedence_category

__all__ = [
    "CompensationCalculatorFacade",
    "CompensationService",
    "EventCompensationService",
    "build_hours_chart",
    "precedence_category",
]
