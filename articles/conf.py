from django.conf import settings


TAG_NAME_MAX_LENGTH = 100

DEFAULT_TAG_DELIMITERS = ',\n'
DEFAULT_TAG_MAX_LENGTH = 50
DEFAULT_TAG_ALLOWED_PATTERN = r'^[0-9a-z가-힣][0-9a-z가-힣 ._+#-]*$'
DEFAULT_TAG_CONFLICT_RETRIES = 3
DEFAULT_POPULAR_TAGS_LIMIT = 8


def tag_delimiters():
    return getattr(settings, 'TAG_DELIMITERS', DEFAULT_TAG_DELIMITERS) or DEFAULT_TAG_DELIMITERS


def tag_max_length():
    """설정값과 컬럼 길이 중 작은 값을 반환합니다."""
    max_length = getattr(settings, 'TAG_MAX_LENGTH', DEFAULT_TAG_MAX_LENGTH)
    if not max_length or max_length <= 0:
        return TAG_NAME_MAX_LENGTH
    return min(int(max_length), TAG_NAME_MAX_LENGTH)


def tag_allowed_pattern():
    return getattr(settings, 'TAG_ALLOWED_PATTERN', DEFAULT_TAG_ALLOWED_PATTERN)


def tag_conflict_retries():
    return max(1, int(getattr(settings, 'TAG_CONFLICT_RETRIES', DEFAULT_TAG_CONFLICT_RETRIES)))


def popular_tags_limit():
    return getattr(settings, 'POPULAR_TAGS_LIMIT', DEFAULT_POPULAR_TAGS_LIMIT)
