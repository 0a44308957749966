from datetime import date, datetime
import uuid


def gen_id() -> str:
    return str(uuid.uuid4())


def today_iso() -> str:
    return date.today().isoformat()


def now_ms() -> int:
    # horodatage en millisecondes, comme les anciens enregistrements
    return int(datetime.now().timestamp() * 1000)


def parse_iso_date(value) -> date | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None
