"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- assets: 자산 목록/가격
- balances: 잔고, 포트폴리오
- ledger: 원장 감사 기록
- transactions: 입출금 요청
- orders: 주문 접수/취소
- admin: 승인/거부, 가격 관리, 체결 정산
"""
