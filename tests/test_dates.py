from datetime import date

import pytest

from tareas.config import settings
from tareas.services.dates import (
    DATE_CONFIDENCE,
    detect_due_date,
    format_date_label,
    today_in,
)

# A Wednesday
TODAY = date(2026, 1, 14)


class TestRelativeDates:
    def test_hoy(self):
        result = detect_due_date("entregar hoy", today=TODAY)
        assert result.value == TODAY
        assert result.confidence == DATE_CONFIDENCE

    def test_manana(self):
        assert detect_due_date("entregar mañana", today=TODAY).value == date(2026, 1, 15)

    def test_pasado_manana_matches_manana_first(self):
        # Rules are tried in order and "mañana" comes first
        assert detect_due_date("pasado mañana", today=TODAY).value == date(2026, 1, 15)

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("este lunes", date(2026, 1, 19)),
            ("este viernes", date(2026, 1, 16)),
            ("este miércoles", date(2026, 1, 21)),
        ],
    )
    def test_weekdays_are_strictly_after_today(self, text, expected):
        assert detect_due_date(text, today=TODAY).value == expected

    def test_esta_semana(self):
        assert detect_due_date("cerrar esta semana", today=TODAY).value == date(2026, 1, 21)

    def test_proxima_semana(self):
        assert detect_due_date("la próxima semana", today=TODAY).value == date(2026, 1, 28)

    def test_fin_de_mes(self):
        assert detect_due_date("pagar a fin de mes", today=TODAY).value == date(2026, 1, 31)
        assert detect_due_date("fin de mes", today=date(2028, 2, 3)).value == date(2028, 2, 29)

    def test_case_insensitive(self):
        assert detect_due_date("Entregar MAÑANA", today=TODAY).value == date(2026, 1, 15)


class TestExplicitDates:
    def test_day_month(self):
        result = detect_due_date("entregar 15/01", today=TODAY)
        assert result.value.month == 1
        assert result.value.day == 15
        assert result.value.year == 2026

    def test_two_digit_year(self):
        assert detect_due_date("entregar 15-01-27", today=TODAY).value == date(2027, 1, 15)

    def test_four_digit_year(self):
        assert detect_due_date("el 3/2/2027", today=TODAY).value == date(2027, 2, 3)

    def test_impossible_date_is_ignored(self):
        result = detect_due_date("entregar 31/02", today=TODAY)
        assert result.value is None
        assert result.confidence == 0.0

    def test_month_name(self):
        assert detect_due_date("5 de marzo", today=TODAY).value == date(2026, 3, 5)
        assert detect_due_date("15 enero", today=TODAY).value == date(2026, 1, 15)

    def test_past_month_name_rolls_forward(self):
        assert detect_due_date("10 de enero", today=TODAY).value == date(2027, 1, 10)

    def test_today_by_month_name_is_not_rolled(self):
        assert detect_due_date("14 de enero", today=TODAY).value == TODAY


class TestNoDate:
    def test_no_date(self):
        result = detect_due_date("comprar pan", today=TODAY)
        assert result.value is None
        assert result.confidence == 0.0

    def test_defaults_to_today_in_user_timezone(self, monkeypatch):
        monkeypatch.setattr(settings, "user_timezone", "Pacific/Kiritimati")
        assert detect_due_date("hoy").value == today_in("Pacific/Kiritimati")


class TestFormatDateLabel:
    def test_today(self):
        assert format_date_label(TODAY, TODAY) == "Hoy"

    def test_tomorrow(self):
        assert format_date_label(date(2026, 1, 15), TODAY) == "Mañana"

    def test_other_dates(self):
        assert format_date_label(date(2026, 1, 20), TODAY) == "20 ene"
        assert format_date_label(date(2026, 9, 3), TODAY) == "3 sept"
