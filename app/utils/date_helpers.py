import re
from datetime import date
from typing import Optional

# MM-YYYY: dos dígitos de mes, guion, cuatro dígitos de año
_MONTH_PATTERN = re.compile(r"([0-9]{2})-([0-9]{4})")


def first_of_month(value: date) -> date:
    """Normaliza cualquier fecha al primer día de su mes."""
    return value.replace(day=1)


def parse_month(value: str, field: str = "date") -> date:
    """Convierte "MM-YYYY" en la fecha del primer día de ese mes.

    Cualquier otro formato (separador distinto, año de tres dígitos,
    mes fuera de 01..12, texto no numérico) lanza ValueError con el
    nombre del campo en el mensaje.
    """
    if not isinstance(value, str):
        raise ValueError(f"invalid {field}, expected MM-YYYY")

    match = _MONTH_PATTERN.fullmatch(value)
    if not match:
        raise ValueError(f"invalid {field}, expected MM-YYYY")

    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise ValueError(f"invalid {field}, expected MM-YYYY")

    return date(year, month, 1)


def parse_optional_month(value: Optional[str], field: str = "date") -> Optional[date]:
    # None significa "sin fecha", no un error de formato
    if value is None:
        return None
    return parse_month(value, field)


def format_month(value: date) -> str:
    return f"{value.month:02d}-{value.year:04d}"
