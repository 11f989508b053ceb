# cardapio/utils/validators.py

# Customer input checks used by checkout.
# Each validate_* returns a Portuguese error message, or None when valid.

from __future__ import annotations
import re
from typing import Optional

_NON_DIGITS = re.compile(r"\D")
_NAME_CHARS = re.compile(r"^[a-zA-ZÀ-ÿ\s'\-]+$")


def clean_phone(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_phone(value: str) -> str:
    """Mask as (XX) XXXXX-XXXX, keeping at most 11 digits."""
    digits = clean_phone(value)[:11]
    if len(digits) <= 2:
        return f"({digits}" if digits else ""
    if len(digits) <= 7:
        return f"({digits[:2]}) {digits[2:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"


def validate_phone(value: str) -> Optional[str]:
    # Brazilian mobile: DDD (11-99) + 9 + 8 digits
    digits = clean_phone(value)

    if not digits:
        return "Informe seu telefone"
    if len(digits) < 11:
        return "Telefone incompleto — digite DDD + 9 dígitos"
    if len(digits) > 11:
        return "Telefone inválido — muitos dígitos"

    ddd = int(digits[:2])
    if ddd < 11 or ddd > 99:
        return "DDD inválido"
    if digits[2] != "9":
        return "Celular deve começar com 9 após o DDD"
    return None


def validate_name(value: str) -> Optional[str]:
    trimmed = (value or "").strip()

    if not trimmed:
        return "Informe seu nome"
    if len(trimmed) < 3:
        return "Nome muito curto"
    if any(ch.isdigit() for ch in trimmed):
        return "Nome não pode conter números"
    if not _NAME_CHARS.match(trimmed):
        return "Nome contém caracteres inválidos"
    return None
