import logging
from collections import defaultdict

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, QuerySet

from . import conf
from .exceptions import PersistenceError, TagConflictError
from .models import ArticleTag, Tag
from .tag_utils import normalize_tag, validate_tag

logger = logging.getLogger(__name__)


class TagRegistry:
    """canonical 태그 이름 → Tag 매핑의 유일한 원본입니다.

    태그 생성 경로는 resolve_or_create 하나뿐이고, 조회(all/popularity)는
    항상 DB를 직접 읽습니다. 동시 생성은 Tag.name의 unique 제약과
    재조회 루프로 처리합니다.
    """

    def __init__(self, max_retries=None):
        self.max_retries = max_retries

    def _retries(self):
        if self.max_retries is not None:
            return max(1, self.max_retries)
        return conf.tag_conflict_retries()

    def _lookup(self, name):
        return Tag.objects.filter(name=name).first()

    def _create(self, name):
        try:
            # 충돌 시 바깥 트랜잭션이 깨지지 않도록 savepoint 안에서 생성
            with transaction.atomic():
                tag = Tag.objects.create(name=name)
        except IntegrityError as exc:
            raise TagConflictError(name) from exc
        logger.info('새 태그를 등록했습니다: %s (id=%s)', name, tag.pk)
        return tag

    def resolve_or_create(self, name):
        """이름으로 Tag를 찾고, 없으면 생성해서 반환합니다.

        대소문자/공백이 달라도 같은 canonical 이름이면 같은 Tag를 반환합니다.
        저장소 오류 시 PersistenceError를 발생시키며, 저장되지 않은 Tag를
        임시로 만들어 반환하는 일은 없습니다.
        """
        canonical = validate_tag(normalize_tag(name))

        retries = self._retries()
        last_conflict = None
        # 충돌 후에는 항상 한 번 더 조회하므로 마지막 회차는 조회만 합니다
        for attempt in range(retries + 1):
            try:
                tag = self._lookup(canonical)
                if tag is not None:
                    return tag
                if attempt == retries:
                    break
                return self._create(canonical)
            except TagConflictError as exc:
                # 다른 요청이 먼저 생성함: 다시 읽어서 그 Tag를 사용
                last_conflict = exc
                logger.info('태그 %r 동시 생성 충돌, 재조회합니다 (%d회차)', canonical, attempt + 1)
            except DatabaseError as exc:
                logger.error('태그 %r 조회/생성 실패', canonical, exc_info=True)
                raise PersistenceError(f'태그 {canonical!r}를 저장하지 못했습니다.') from exc

        logger.error('태그 %r 충돌이 %d회 반복되어 중단합니다', canonical, retries)
        raise PersistenceError(f'태그 {canonical!r} 생성 충돌이 해소되지 않았습니다.') from last_conflict

    def all(self):
        """등록된 모든 Tag를 이름순으로 반환합니다. 캐시 없이 매번 DB를 읽습니다."""
        try:
            return list(Tag.objects.order_by('name'))
        except DatabaseError as exc:
            raise PersistenceError('태그 목록을 읽지 못했습니다.') from exc

    def popularity(self, tags=None, associations=None):
        """각 Tag를 참조하는 글 수를 (Tag, count) 리스트로 반환합니다.

        count 내림차순, 같으면 이름 오름차순입니다. associations는 ArticleTag
        QuerySet이거나 (article_id, tag_id) 쌍의 iterable입니다.
        """
        if tags is None:
            tags = self.all()
        tags = list(tags)
        if associations is None:
            associations = ArticleTag.objects.all()

        tag_ids = [tag.pk for tag in tags]
        if isinstance(associations, QuerySet):
            try:
                rows = (
                    associations
                    .filter(tag_id__in=tag_ids)
                    .values('tag_id')
                    .annotate(count=Count('article', distinct=True))
                    .order_by()
                )
                counts = {row['tag_id']: row['count'] for row in rows}
            except DatabaseError as exc:
                raise PersistenceError('태그 사용 빈도를 읽지 못했습니다.') from exc
        else:
            wanted = set(tag_ids)
            articles_by_tag = defaultdict(set)
            for article_id, tag_id in associations:
                if tag_id in wanted:
                    articles_by_tag[tag_id].add(article_id)
            counts = {tag_id: len(article_ids) for tag_id, article_ids in articles_by_tag.items()}

        ranked = [(tag, counts.get(tag.pk, 0)) for tag in tags]
        return sorted(ranked, key=lambda x: (-x[1], x[0].name))

    def popular(self, limit=None):
        """한 번 이상 사용된 태그만 빈도순으로 반환합니다."""
        ranked = [(tag, count) for tag, count in self.popularity() if count > 0]
        if limit is not None:
            ranked = ranked[:limit]
        return ranked

    def unreferenced(self):
        return Tag.objects.filter(article_links__isnull=True).order_by('name')

    def prune_unreferenced(self):
        """어떤 글도 참조하지 않는 Tag를 삭제하고 삭제 개수를 반환합니다.

        글 작성/수정 경로에서는 호출하지 않는 별도 정리 작업입니다.
        """
        with transaction.atomic():
            deleted, _ = Tag.objects.filter(
                pk__in=list(self.unreferenced().values_list('pk', flat=True))
            ).delete()
        logger.info('참조되지 않는 태그 %d개를 삭제했습니다', deleted)
        return deleted


registry = TagRegistry()
