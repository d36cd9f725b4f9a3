import json
import logging
import os

from django.http import JsonResponse
from django.views.decorators.cache import never_cache
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .exceptions import PersistenceError
from .models import Article
from .registry import registry
from .services import create_article, update_article
from .tag_utils import TagInput, normalize_tag
from .utils import process_uploaded_md, validate_title

logger = logging.getLogger(__name__)

PERSISTENCE_ERROR_MESSAGE = '저장소에 일시적으로 접근할 수 없습니다. 잠시 후 다시 시도해주세요.'


def _serialize_article(article, with_body=False):
    data = {
        'title': article.title,
        'slug': article.slug,
        'date': article.created_at.isoformat(),
        'summary': article.summary,
        'tags': article.tag_names,
    }
    if with_body:
        data['body'] = article.body_md
        data['body_html'] = article.body_html
    return data


def _parse_article_payload(request):
    """JSON 본문에서 (fields, None) 또는 (None, error)를 반환합니다."""
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, ValueError):
        return None, 'JSON 형식이 올바르지 않습니다.'
    if not isinstance(data, dict):
        return None, 'JSON 객체가 필요합니다.'

    title = str(data.get('title') or '').strip()
    body = str(data.get('body') or '').strip()
    summary = str(data.get('summary') or '').strip()
    if not title or not body:
        return None, '제목과 본문을 입력해주세요.'
    error = validate_title(title)
    if error:
        return None, error

    raw_tags = data.get('tags', [])
    # 쉼표 문자열을 그대로 받으면 글자 단위 태그가 생기므로 배열만 허용
    if not isinstance(raw_tags, list) or not all(isinstance(t, str) for t in raw_tags):
        return None, 'tags는 문자열 배열이어야 합니다.'

    return {
        'title': title,
        'body_md': body,
        'summary': summary,
        'tags': TagInput(raw_tags),
    }, None


def _persistence_error_response():
    return JsonResponse({'error': PERSISTENCE_ERROR_MESSAGE}, status=503)


@csrf_exempt
@require_GET
def api_tag_list(request):
    try:
        tags = registry.all()
    except PersistenceError:
        return _persistence_error_response()
    return JsonResponse({'tags': [tag.name for tag in tags]})


@never_cache
@csrf_exempt
@require_GET
def api_popular_tags(request):
    limit = request.GET.get('limit', '')
    try:
        limit = max(1, int(limit)) if limit else None
    except (ValueError, TypeError):
        limit = None

    try:
        ranked = registry.popular(limit=limit)
    except PersistenceError:
        return _persistence_error_response()

    return JsonResponse({
        'tags': [{'name': tag.name, 'count': count} for tag, count in ranked],
    })


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def api_article_list(request):
    if request.method == 'POST':
        return _create_article(request)

    tag = normalize_tag(request.GET.get('tag', ''))
    page = request.GET.get('page', '1')
    per_page = request.GET.get('per_page', '20')

    try:
        page = max(1, int(page))
        per_page = min(100, max(1, int(per_page)))
    except (ValueError, TypeError):
        page, per_page = 1, 20

    articles = Article.objects.prefetch_related('tag_links__tag')
    if tag:
        articles = articles.filter(tags__name=tag)

    total = articles.count()
    start = (page - 1) * per_page
    end = start + per_page
    page_articles = articles[start:end]

    return JsonResponse({
        'articles': [_serialize_article(a) for a in page_articles],
        'pagination': {
            'page': page,
            'per_page': per_page,
            'total': total,
            'total_pages': (total + per_page - 1) // per_page if total else 0,
        },
    })


def _create_article(request):
    fields, error = _parse_article_payload(request)
    if error:
        return JsonResponse({'error': error}, status=400)

    try:
        article = create_article(**fields)
    except PersistenceError:
        return _persistence_error_response()

    return JsonResponse(_serialize_article(article, with_body=True), status=201)


@csrf_exempt
@require_http_methods(['GET', 'POST', 'PUT'])
def api_article_detail(request, slug):
    try:
        article = Article.objects.get(slug=slug)
    except Article.DoesNotExist:
        return JsonResponse({'error': '글을 찾을 수 없습니다.'}, status=404)

    if request.method == 'GET':
        return JsonResponse(_serialize_article(article, with_body=True))

    fields, error = _parse_article_payload(request)
    if error:
        return JsonResponse({'error': error}, status=400)

    try:
        article = update_article(article, **fields)
    except PersistenceError:
        return _persistence_error_response()

    return JsonResponse(_serialize_article(article, with_body=True))


@csrf_exempt
@require_POST
def api_upload_post(request):
    uploaded = request.FILES.get('file')
    if not uploaded:
        return JsonResponse({'error': '파일이 첨부되지 않았습니다.'}, status=400)

    ext = os.path.splitext(uploaded.name)[1].lower()
    if ext != '.md':
        return JsonResponse({'error': '.md 파일만 업로드할 수 있습니다.'}, status=400)
    if uploaded.size > 2 * 1024 * 1024:
        return JsonResponse({'error': '.md 파일은 2MB 이하만 가능합니다.'}, status=400)

    try:
        slug, error = process_uploaded_md(uploaded)
    except PersistenceError:
        return _persistence_error_response()

    if error:
        return JsonResponse({'error': error}, status=400)

    logger.info('업로드된 글을 등록했습니다: %s', slug)
    return JsonResponse({'slug': slug, 'url': f'/api/articles/{slug}/'})
