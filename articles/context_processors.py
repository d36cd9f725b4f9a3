from . import conf
from .registry import registry
from .tag_utils import normalize_tag


def popular_tags(request):
    """요청마다 레지스트리에서 인기 태그를 새로 계산합니다."""
    all_tag_items = [(tag.name, count) for tag, count in registry.popular()]
    return {
        'popular_tags': all_tag_items[:conf.popular_tags_limit()],
        'all_tag_items': all_tag_items,
        'all_tags': [tag for tag, _ in all_tag_items],
        'current_tag': normalize_tag(request.GET.get('tag', '')),
    }
