"""
Web 서비스 패키지

앱 단위로 공유되는 정산 서비스 묶음
"""

from web.services.exchange import ExchangeServices

__all__ = [
    "ExchangeServices",
]
