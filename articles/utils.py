import os
import re

import bleach
import yaml
import markdown
from datetime import datetime, date

from django.utils import timezone


ALLOWED_TAGS = [
    'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'a', 'img', 'ul', 'ol', 'li',
    'code', 'pre', 'blockquote',
    'table', 'thead', 'tbody', 'tr', 'th', 'td',
    'em', 'strong', 'br', 'hr', 'div', 'span',
]
ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title'],
    'img': ['src', 'alt', 'title'],
    'code': ['class'],
}
ALLOWED_PROTOCOLS = ['http', 'https', 'mailto']


def _sanitize_html(html):
    """Markdown 렌더링 결과에서 허용된 태그/속성만 남기고 제거합니다."""
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
    )


def render_markdown(body_md):
    """마크다운 텍스트를 sanitized HTML로 변환합니다."""
    html = markdown.markdown(body_md, extensions=['fenced_code', 'tables'])
    return _sanitize_html(html)


def make_slug(title):
    """제목에서 slug를 생성합니다."""
    slug = title.lower().strip()
    slug = re.sub(r'[^\w\s가-힣-]', '', slug)
    slug = re.sub(r'[\s]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'untitled'


def validate_title(title):
    """제목이 title 컬럼 길이를 넘으면 오류 메시지를, 아니면 None을 반환합니다."""
    from .models import Article
    max_length = Article._meta.get_field('title').max_length
    if len(title) > max_length:
        return f'제목은 {max_length}자 이하로 작성해주세요.'
    return None


def _slug_with_suffix(base, suffix, max_length):
    # suffix를 붙여도 컬럼 길이를 넘지 않도록 base를 자름
    base = base[:max_length - len(suffix)].rstrip('-') or 'untitled'
    return f'{base}{suffix}'


def unique_slug(slug, exclude_pk=None):
    """slug 충돌 시 카운터를 붙여 유일한 slug를 반환합니다. 길이는 slug 컬럼에 맞춥니다."""
    from .models import Article
    max_length = Article._meta.get_field('slug').max_length
    qs = Article.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    candidate = _slug_with_suffix(slug, '', max_length)
    if not qs.filter(slug=candidate).exists():
        return candidate
    counter = 1
    while qs.filter(slug=_slug_with_suffix(slug, f'-{counter}', max_length)).exists():
        counter += 1
    return _slug_with_suffix(slug, f'-{counter}', max_length)


def parse_date(raw_date):
    """다양한 형태의 날짜를 aware datetime으로 변환합니다."""
    if isinstance(raw_date, str):
        try:
            dt = datetime.strptime(raw_date, '%Y-%m-%d %H:%M:%S')
        except ValueError:
            try:
                dt = datetime.strptime(raw_date, '%Y-%m-%d')
            except ValueError:
                dt = datetime.now()
    elif isinstance(raw_date, datetime):
        dt = raw_date
    elif isinstance(raw_date, date):
        dt = datetime(raw_date.year, raw_date.month, raw_date.day)
    else:
        dt = datetime.now()

    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


# ---------------------------------------------------------------------------
# Frontmatter 파싱
# ---------------------------------------------------------------------------

def extract_frontmatter_and_body(content):
    """frontmatter(dict)와 body(str)를 분리하여 반환합니다."""
    if content.startswith('---'):
        parts = content.split('---', 2)
        if len(parts) >= 3:
            meta = yaml.safe_load(parts[1]) or {}
            body = parts[2].strip()
            return meta, body
    return {}, content


def ensure_frontmatter(meta, fallback_title):
    """누락된 메타데이터를 자동으로 채웁니다."""
    if not meta.get('title'):
        meta['title'] = fallback_title
    if not meta.get('date'):
        meta['date'] = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    return meta


def process_uploaded_md(file):
    """업로드된 .md 파일로 글을 만들어 (slug, None) 또는 (None, error) 반환.

    frontmatter의 tags는 쉼표 문자열이든 리스트든 같은 경로로 정규화됩니다.
    저장소 오류(PersistenceError)는 호출한 쪽으로 전달됩니다.
    """
    from .services import create_article
    from .tag_utils import parse_tag_input

    try:
        content = file.read().decode('utf-8')
    except UnicodeDecodeError:
        return None, '파일 인코딩이 UTF-8이 아닙니다.'

    fallback_title = os.path.splitext(file.name)[0]
    try:
        meta, body = extract_frontmatter_and_body(content)
    except yaml.YAMLError:
        return None, 'frontmatter 형식이 올바르지 않습니다.'
    if not isinstance(meta, dict):
        return None, 'frontmatter 형식이 올바르지 않습니다.'
    meta = ensure_frontmatter(meta, fallback_title)
    title = str(meta['title'])
    error = validate_title(title)
    if error:
        return None, error

    try:
        tags = parse_tag_input(meta.get('tags'))
    except TypeError:
        return None, 'tags는 쉼표로 구분된 문자열이나 목록이어야 합니다.'

    article = create_article(
        title=title,
        body_md=body,
        tags=tags,
        summary=str(meta.get('summary') or ''),
        created_at=parse_date(meta['date']),
    )
    return article.slug, None
