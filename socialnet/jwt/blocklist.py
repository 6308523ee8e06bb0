"""
로그아웃된 액세스 토큰의 jti 목록

- POST /api/auth/logout 시 TokenService.revoke()가 jti를 추가
- TokenService.validate_token()은 여기 등재된 jti를 401로 거부
- 프로세스 메모리에만 존재하므로 재시작하면 비워지고 워커 간 공유되지 않음
"""

from typing import Set

jwt_blocklist: Set[str] = set()
