import logging
import re

from . import conf
from .exceptions import TagValidationError

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r'\s+')


class TagInput(tuple):
    """작성자가 입력한 태그 문자열의 순서 있는 시퀀스입니다.

    구분자로 나뉘지 않은 문자열을 그대로 받으면 하위 단계에서 글자 단위로
    순회되므로, 생성 시점에 str/bytes를 거부합니다. 문자열 입력은
    ``TagInput.from_text()``나 ``parse_tag_input()``을 거쳐야 합니다.
    """

    def __new__(cls, items=()):
        if isinstance(items, (str, bytes)):
            raise TypeError(
                'TagInput에는 문자열 시퀀스가 필요합니다. '
                '구분자로 이어진 문자열은 TagInput.from_text()로 변환하세요.'
            )
        values = []
        for item in items:
            if not isinstance(item, str):
                raise TypeError(f'태그는 문자열이어야 합니다: {item!r}')
            values.append(item)
        return super().__new__(cls, values)

    @classmethod
    def from_text(cls, text, delimiters=None):
        """구분자(기본: 쉼표, 줄바꿈)로 이어진 문자열을 나눕니다."""
        delimiters = delimiters or conf.tag_delimiters()
        return cls(re.split(f'[{re.escape(delimiters)}]', text))


def parse_tag_input(raw_tags):
    """폼, JSON, frontmatter에서 받은 태그 입력을 TagInput으로 변환합니다."""
    if isinstance(raw_tags, TagInput):
        return raw_tags
    if raw_tags is None:
        return TagInput()
    if isinstance(raw_tags, str):
        return TagInput.from_text(raw_tags)
    if isinstance(raw_tags, (list, tuple)):
        return TagInput(str(t) for t in raw_tags if t is not None)
    raise TypeError(f'지원하지 않는 태그 입력 형식입니다: {type(raw_tags).__name__}')


def normalize_tag(raw_tag):
    """태그 하나를 비교용 canonical 형태로 변환합니다. 비어 있으면 ''를 반환합니다."""
    return _WHITESPACE_RE.sub(' ', str(raw_tag).strip()).lower()


def validate_tag(name):
    """canonical 태그의 길이/문자 규칙을 검사합니다. 위반 시 TagValidationError."""
    if not name:
        raise TagValidationError(name, '빈 태그')

    max_length = conf.tag_max_length()
    if len(name) > max_length:
        raise TagValidationError(name, f'{max_length}자 초과')

    if any(d in name for d in conf.tag_delimiters()):
        raise TagValidationError(name, '구분자 포함')

    pattern = conf.tag_allowed_pattern()
    if pattern and not re.fullmatch(pattern, name):
        raise TagValidationError(name, '허용되지 않는 문자')
    return name


def is_valid_tag(name):
    try:
        validate_tag(name)
    except TagValidationError:
        return False
    return True


def normalize(raw_tags):
    """태그 입력을 중복 없는 canonical 태그 리스트로 변환합니다.

    순서: 분리 → 공백 제거 → 빈 토큰 제외 → 소문자화 → 첫 등장 순서로 중복 제거
    → 길이/문자 규칙 위반 토큰 제외. 잘못된 토큰은 오류 없이 버려지므로
    태그 형식 때문에 글 저장이 실패하지 않습니다.
    """
    tag_input = parse_tag_input(raw_tags)
    normalized = []
    seen = set()
    for raw in tag_input:
        tag = normalize_tag(raw)
        if not tag or tag in seen:
            continue
        seen.add(tag)
        try:
            validate_tag(tag)
        except TagValidationError as exc:
            logger.debug('태그 토큰을 제외합니다: %s', exc)
            continue
        normalized.append(tag)
    return normalized
