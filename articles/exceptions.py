class TagError(Exception):
    """태그 처리 중 발생하는 오류의 기본 클래스입니다."""


class TagValidationError(TagError):
    """정규화할 수 없거나 허용되지 않는 태그 토큰입니다."""

    def __init__(self, token, reason):
        self.token = token
        self.reason = reason
        super().__init__(f'{token!r}: {reason}')


class TagConflictError(TagError):
    """같은 이름의 태그가 동시에 생성되어 unique 제약에 걸렸습니다."""

    def __init__(self, name):
        self.name = name
        super().__init__(f'태그 {name!r} 생성이 다른 요청과 충돌했습니다.')


class PersistenceError(TagError):
    """저장소에 접근할 수 없어 태그 또는 글을 저장하지 못했습니다. 재시도 가능합니다."""
