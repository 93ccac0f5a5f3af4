# utils.py
import re
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite devolve datetimes sem fuso; trata-os como UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def only_digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def _check_digit(digits: str, weights: list[int]) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    rest = total % 11
    return 0 if rest < 2 else 11 - rest


def is_valid_cpf(value: str) -> bool:
    cpf = only_digits(value)
    if len(cpf) != 11 or cpf == cpf[0] * 11:
        return False
    first = _check_digit(cpf[:9], list(range(10, 1, -1)))
    second = _check_digit(cpf[:10], list(range(11, 1, -1)))
    return cpf[-2:] == f"{first}{second}"


def is_valid_cnpj(value: str) -> bool:
    cnpj = only_digits(value)
    if len(cnpj) != 14 or cnpj == cnpj[0] * 14:
        return False
    weights = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    first = _check_digit(cnpj[:12], weights)
    second = _check_digit(cnpj[:13], [6] + weights)
    return cnpj[-2:] == f"{first}{second}"


def dup_key_on(err, needle: str) -> bool:
    """Detecta qual constraint/coluna disparou a violação de unicidade."""
    msg = str(getattr(err, "orig", err))
    return needle in msg


def is_not_null_violation(err) -> bool:
    # SQLite: "NOT NULL constraint failed"; Postgres: "violates not-null constraint"
    msg = str(getattr(err, "orig", err)).lower()
    return "not null" in msg or "not-null" in msg
