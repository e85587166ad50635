from enum import Enum


class EnquiryStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    RESOLVED = "resolved"
    CLOSED = "closed"


# 고객 이메일이 없을 때 사용하는 임시 도메인
TEMP_EMAIL_DOMAIN = "temp.regal-horeca.com"
GUEST_CUSTOMER_NAME = "Guest User"
