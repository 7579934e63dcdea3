from datetime import date

from app.models.mission import DayOfWeek


# Indexed by date.weekday(): Monday is 0
WEEKDAY_LABELS: tuple[DayOfWeek, ...] = (
    "Segunda-feira",
    "Terça-feira",
    "Quarta-feira",
    "Quinta-feira",
    "Sexta-feira",
    "Sábado",
    "Domingo",
)

WORKING_DAYS: tuple[DayOfWeek, ...] = WEEKDAY_LABELS[:5]


def day_of_week(day: date) -> DayOfWeek:
    return WEEKDAY_LABELS[day.weekday()]


def current_day_of_week(today: date | None = None) -> DayOfWeek:
    """Weekday label of the daily board for ``today``. Weekends fall back to Monday."""
    label = day_of_week(today or date.today())
    return label if label in WORKING_DAYS else WORKING_DAYS[0]
