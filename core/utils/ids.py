"""
ID 생성 유틸리티

규칙: {prefix}-{uuid4 hex 12자리}
예: tx-3f2a9c01b7d4, ord-0c11e2f9a8b3
"""

import uuid

ID_HEX_LENGTH: int = 12


def new_id(prefix: str) -> str:
    """접두사가 붙은 새 ID 생성

    Args:
        prefix: 엔티티 접두사 (ast, tx, ord, le)

    Returns:
        "{prefix}-{hex}" 형식의 ID
    """
    if not prefix:
        raise ValueError("prefix는 비어 있을 수 없습니다")

    return f"{prefix}-{uuid.uuid4().hex[:ID_HEX_LENGTH]}"
