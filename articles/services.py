"""글과 태그를 연결하는 서비스.

글의 태그 집합과 전역 태그 레지스트리는 항상 하나의 트랜잭션에서 함께
갱신됩니다. 둘 중 한쪽만 반영되는 경로가 없으므로, 저장된 글이 참조하는
태그는 저장 직후부터 인기 태그 목록에 나타납니다.
"""
import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from .exceptions import PersistenceError
from .models import Article, ArticleTag
from .registry import registry as default_registry
from .tag_utils import normalize
from .utils import make_slug, unique_slug

logger = logging.getLogger(__name__)


def _replace_tag_links(article, tags):
    ArticleTag.objects.filter(article=article).delete()
    ArticleTag.objects.bulk_create([
        ArticleTag(article=article, tag=tag, position=position)
        for position, tag in enumerate(tags)
    ])


def apply_tags(article, raw_tag_input, registry=None):
    """태그 입력을 정규화해 레지스트리에서 해석하고, 글과 함께 저장합니다.

    기존 태그 집합은 통째로 교체됩니다. 어느 태그든 해석에 실패하면 글과
    새로 만든 태그 모두 커밋되지 않고 같은 오류가 그대로 전달됩니다.
    """
    registry = registry or default_registry
    tokens = normalize(raw_tag_input)
    adding = article._state.adding

    try:
        with transaction.atomic():
            tags = [registry.resolve_or_create(token) for token in tokens]
            article.save()
            _replace_tag_links(article, tags)
    except DatabaseError as exc:
        _reset_unsaved(article, adding)
        logger.error('글 %r 저장 실패', article.slug, exc_info=True)
        raise PersistenceError(f'글 {article.slug!r}을 저장하지 못했습니다.') from exc
    except Exception:
        _reset_unsaved(article, adding)
        raise

    logger.debug('글 %r 태그 적용: %s', article.slug, tokens)
    return article


def _reset_unsaved(article, adding):
    # 롤백된 새 글이 저장된 것처럼 보이지 않도록 pk를 되돌림
    if adding:
        article.pk = None
        article._state.adding = True


def create_article(title, body_md, tags, summary='', created_at=None, registry=None):
    article = Article(
        title=title,
        slug=unique_slug(make_slug(title)),
        summary=summary,
        body_md=body_md,
        created_at=created_at or timezone.now(),
    )
    return apply_tags(article, tags, registry=registry)


def update_article(article, title, body_md, tags, summary='', registry=None):
    """본문 필드를 갱신하고 태그 집합을 교체합니다. created_at은 유지됩니다."""
    new_slug = unique_slug(make_slug(title), exclude_pk=article.pk)

    article.title = title
    article.slug = new_slug
    article.summary = summary
    article.body_md = body_md
    return apply_tags(article, tags, registry=registry)
