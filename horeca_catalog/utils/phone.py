import re

_NON_DIGIT = re.compile(r"\D")


def normalize_phone(phone: str) -> str:
    """
    전화번호를 10자리 숫자로 정규화.
    '+91 98765-43210' -> '9876543210', '091-9876543210' -> '9876543210'
    """
    if not phone:
        return ""
    digits = _NON_DIGIT.sub("", phone)
    if not digits:
        return ""

    # 국가 코드(91) 제거
    if len(digits) == 12 and digits.startswith("91"):
        return digits[2:]

    if digits.startswith("0"):
        digits = digits[1:]
    return digits[-10:]


def format_phone(phone: str) -> str:
    normalized = normalize_phone(phone)
    if len(normalized) != 10:
        return phone
    return f"+91 {normalized[:5]} {normalized[5:]}"
