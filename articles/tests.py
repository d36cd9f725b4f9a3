import json
from io import StringIO
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.db import OperationalError, connection
from django.test import RequestFactory, TestCase, override_settings
from django.test.utils import CaptureQueriesContext

from articles import utils
from articles.context_processors import popular_tags
from articles.exceptions import PersistenceError, TagValidationError
from articles.models import Article, ArticleTag, Tag
from articles.registry import TagRegistry, registry
from articles.services import apply_tags, create_article, update_article
from articles.tag_utils import (
    TagInput, is_valid_tag, normalize, normalize_tag, parse_tag_input,
)


def _ranked(items):
    return [(tag.name, count) for tag, count in items]


class StaleReadRegistry(TagRegistry):
    """다른 요청이 먼저 커밋한 태그를 첫 조회에서 보지 못한 상황을 재현합니다."""

    def __init__(self, stale_reads=1, **kwargs):
        super().__init__(**kwargs)
        self.stale_reads = stale_reads

    def _lookup(self, name):
        if self.stale_reads > 0:
            self.stale_reads -= 1
            return None
        return super()._lookup(name)


class FailingRegistry(TagRegistry):
    """특정 태그에서 저장소 오류를 발생시킵니다."""

    def __init__(self, fail_on, **kwargs):
        super().__init__(**kwargs)
        self.fail_on = fail_on

    def resolve_or_create(self, name):
        if name == self.fail_on:
            raise PersistenceError('connection refused')
        return super().resolve_or_create(name)


# ──────────────────────────────────────────────
# 단위 테스트: 태그 입력 경계와 정규화
# ──────────────────────────────────────────────

class TagInputTest(TestCase):
    def test_rejects_plain_string(self):
        with self.assertRaises(TypeError):
            TagInput('go, rust')

    def test_rejects_bytes(self):
        with self.assertRaises(TypeError):
            TagInput(b'go')

    def test_rejects_non_string_item(self):
        with self.assertRaises(TypeError):
            TagInput(['go', 3])

    def test_from_text_splits_commas_and_newlines(self):
        self.assertEqual(TagInput.from_text('go, rust\nzig'), ('go', ' rust', 'zig'))

    @override_settings(TAG_DELIMITERS=';')
    def test_from_text_configured_delimiter(self):
        self.assertEqual(TagInput.from_text('go;rust, zig'), ('go', 'rust, zig'))


class ParseTagInputTest(TestCase):
    def test_string_and_list_converge(self):
        self.assertEqual(
            normalize(parse_tag_input('Python, Django')),
            normalize(parse_tag_input(['Python', 'Django'])),
        )

    def test_none_is_empty(self):
        self.assertEqual(parse_tag_input(None), TagInput())

    def test_list_items_stringified(self):
        # YAML frontmatter의 tags: [2024, python]
        self.assertEqual(parse_tag_input([2024, 'python']), ('2024', 'python'))

    def test_unsupported_type(self):
        with self.assertRaises(TypeError):
            parse_tag_input({'python': True})

    def test_tag_input_passthrough(self):
        tags = TagInput(['go'])
        self.assertIs(parse_tag_input(tags), tags)


class NormalizeTagTest(TestCase):
    def test_trim_and_lower(self):
        self.assertEqual(normalize_tag('  Food '), 'food')

    def test_collapse_inner_whitespace(self):
        self.assertEqual(normalize_tag('Machine \t  Learning'), 'machine learning')

    def test_empty(self):
        self.assertEqual(normalize_tag('   '), '')


class NormalizeTest(TestCase):
    def test_scenario(self):
        self.assertEqual(normalize('  Food , food, COOKING ,  '), ['food', 'cooking'])

    def test_idempotent(self):
        samples = [
            '  Food , food, COOKING ,  ',
            ['Go', ' go ', 'Rust', '', '파이썬'],
            'c++, C#, machine   learning\nDjango',
            ['hello!', 'ok', 'a' * 80],
            '',
        ]
        for raw in samples:
            once = normalize(raw)
            self.assertEqual(normalize(once), once, raw)

    def test_preserves_first_seen_order(self):
        self.assertEqual(normalize(['zig', 'Go', 'ZIG', 'rust']), ['zig', 'go', 'rust'])

    def test_korean_tags(self):
        self.assertEqual(normalize('파이썬, 장고'), ['파이썬', '장고'])

    def test_disallowed_characters_dropped(self):
        self.assertEqual(normalize(['hello!', 'ok', '<script>']), ['ok'])

    @override_settings(TAG_ALLOWED_PATTERN=None)
    def test_pattern_disabled(self):
        self.assertEqual(normalize(['hello!']), ['hello!'])

    @override_settings(TAG_ALLOWED_PATTERN=None)
    def test_delimiter_inside_list_item_dropped(self):
        self.assertEqual(normalize(['a,b', 'c']), ['c'])

    @override_settings(TAG_MAX_LENGTH=5)
    def test_max_length(self):
        self.assertEqual(normalize('short, toolong'), ['short'])

    def test_empty_input(self):
        self.assertEqual(normalize(''), [])
        self.assertEqual(normalize([]), [])
        self.assertEqual(normalize(None), [])

    def test_is_valid_tag(self):
        self.assertTrue(is_valid_tag('django'))
        self.assertFalse(is_valid_tag(''))
        self.assertFalse(is_valid_tag('-leading-dash'))


# ──────────────────────────────────────────────
# 단위 테스트: 태그 레지스트리
# ──────────────────────────────────────────────

class TagRegistryTest(TestCase):
    def test_resolve_same_identity_across_casing(self):
        first = registry.resolve_or_create('Python')
        second = registry.resolve_or_create('  python ')
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Tag.objects.count(), 1)
        self.assertEqual(first.name, 'python')

    def test_resolve_logs_creation(self):
        with self.assertLogs('articles.registry', level='INFO') as logs:
            registry.resolve_or_create('django')
        self.assertIn('django', logs.output[0])

    def test_resolve_rejects_empty_name(self):
        with self.assertRaises(TagValidationError):
            registry.resolve_or_create('   ')
        self.assertEqual(Tag.objects.count(), 0)

    def test_all_reflects_writes_immediately(self):
        self.assertEqual(registry.all(), [])
        registry.resolve_or_create('zig')
        registry.resolve_or_create('go')
        self.assertEqual([t.name for t in registry.all()], ['go', 'zig'])

    def test_lost_race_reuses_winner(self):
        winner = Tag.objects.create(name='rust')
        loser = StaleReadRegistry(stale_reads=1)
        tag = loser.resolve_or_create('Rust')
        self.assertEqual(tag.pk, winner.pk)
        self.assertEqual(Tag.objects.filter(name='rust').count(), 1)

    def test_many_racing_callers_share_one_tag(self):
        winner = registry.resolve_or_create('brand new')
        callers = [StaleReadRegistry(stale_reads=1) for _ in range(5)]
        results = [c.resolve_or_create('Brand  New') for c in callers]
        self.assertEqual({t.pk for t in results}, {winner.pk})
        self.assertEqual(Tag.objects.count(), 1)

    def test_single_retry_rereads_winner(self):
        winner = Tag.objects.create(name='rust')
        loser = StaleReadRegistry(stale_reads=1, max_retries=1)
        self.assertEqual(loser.resolve_or_create('rust').pk, winner.pk)

    @override_settings(TAG_CONFLICT_RETRIES=1)
    def test_single_retry_setting(self):
        winner = Tag.objects.create(name='rust')
        self.assertEqual(StaleReadRegistry(stale_reads=1).resolve_or_create('Rust').pk, winner.pk)

    def test_conflict_retries_exhausted(self):
        Tag.objects.create(name='rust')
        stuck = StaleReadRegistry(stale_reads=10, max_retries=3)
        with self.assertRaises(PersistenceError):
            stuck.resolve_or_create('rust')
        self.assertEqual(Tag.objects.count(), 1)

    def test_storage_unavailable(self):
        with mock.patch.object(TagRegistry, '_lookup', side_effect=OperationalError('connection refused')):
            with self.assertRaises(PersistenceError):
                registry.resolve_or_create('go')
        self.assertEqual(Tag.objects.count(), 0)

    def test_popularity_scenario(self):
        create_article('A', 'body', ['go', 'rust'])
        create_article('B', 'body', ['rust', 'zig'])
        self.assertEqual(
            _ranked(registry.popularity()),
            [('rust', 2), ('go', 1), ('zig', 1)],
        )

    def test_popularity_after_edit(self):
        article_a = create_article('A', 'body', ['go', 'rust'])
        create_article('B', 'body', ['rust', 'zig'])
        update_article(article_a, 'A', 'body', ['go'])

        self.assertIn('rust', [t.name for t in registry.all()])
        self.assertEqual(
            _ranked(registry.popularity()),
            [('go', 1), ('rust', 1), ('zig', 1)],
        )

    def test_popularity_includes_unreferenced(self):
        create_article('A', 'body', ['go'])
        registry.resolve_or_create('unused')
        self.assertEqual(_ranked(registry.popularity()), [('go', 1), ('unused', 0)])

    def test_popularity_from_pairs(self):
        go = registry.resolve_or_create('go')
        rust = registry.resolve_or_create('rust')
        zig = registry.resolve_or_create('zig')
        pairs = [(1, go.pk), (1, go.pk), (2, go.pk), (2, rust.pk)]
        self.assertEqual(
            _ranked(registry.popularity([go, rust, zig], pairs)),
            [('go', 2), ('rust', 1), ('zig', 0)],
        )

    def test_popularity_subset(self):
        create_article('A', 'body', ['go', 'rust'])
        rust = Tag.objects.get(name='rust')
        self.assertEqual(_ranked(registry.popularity([rust])), [('rust', 1)])

    def test_popular_skips_zero_and_limits(self):
        create_article('A', 'body', ['go', 'rust'])
        create_article('B', 'body', ['rust'])
        registry.resolve_or_create('unused')
        self.assertEqual(_ranked(registry.popular()), [('rust', 2), ('go', 1)])
        self.assertEqual(_ranked(registry.popular(limit=1)), [('rust', 2)])

    def test_prune_unreferenced(self):
        create_article('A', 'body', ['go'])
        registry.resolve_or_create('orphan')
        self.assertEqual(registry.prune_unreferenced(), 1)
        self.assertEqual([t.name for t in registry.all()], ['go'])


# ──────────────────────────────────────────────
# 통합 테스트: 글-태그 연결 서비스
# ──────────────────────────────────────────────

class ApplyTagsTest(TestCase):
    def test_create_with_raw_text(self):
        article = create_article('Food', 'body', '  Food , food, COOKING ,  ')
        self.assertEqual(article.tag_names, ['food', 'cooking'])

    def test_referenced_tags_registered_after_save(self):
        article = create_article('Post', 'body', ['Go', 'Rust'])
        registered = {t.name for t in registry.all()}
        for name in article.tag_names:
            self.assertIn(name, registered)

    def test_tag_refs_point_to_shared_tags(self):
        a = create_article('A', 'body', ['go'])
        b = create_article('B', 'body', ['GO'])
        self.assertEqual(
            a.tag_links.get().tag_id,
            b.tag_links.get().tag_id,
        )

    def test_edit_replaces_wholesale(self):
        article = create_article('A', 'body', ['go', 'rust'])
        update_article(article, 'A', 'body', ['zig'])
        article.refresh_from_db()
        self.assertEqual(article.tag_names, ['zig'])
        self.assertEqual(ArticleTag.objects.filter(article=article).count(), 1)

    def test_edit_keeps_author_order(self):
        article = create_article('A', 'body', ['go', 'rust'])
        update_article(article, 'A', 'body', ['rust', 'go'])
        self.assertEqual(article.tag_names, ['rust', 'go'])

    def test_empty_tags(self):
        article = create_article('A', 'body', [])
        self.assertIsNotNone(article.pk)
        self.assertEqual(article.tag_names, [])

    def test_failed_resolution_commits_nothing(self):
        failing = FailingRegistry(fail_on='rust')
        with self.assertRaises(PersistenceError):
            create_article('A', 'body', ['go', 'rust'], registry=failing)
        self.assertEqual(Article.objects.count(), 0)
        self.assertFalse(Tag.objects.filter(name='go').exists())

    def test_failed_edit_keeps_previous_tags(self):
        article = create_article('A', 'body', ['go'])
        failing = FailingRegistry(fail_on='rust')
        with self.assertRaises(PersistenceError):
            update_article(article, 'A', 'body', ['zig', 'rust'], registry=failing)
        article.refresh_from_db()
        self.assertEqual(article.tag_names, ['go'])
        self.assertFalse(Tag.objects.filter(name='zig').exists())

    def test_article_save_failure_rolls_back_new_tags(self):
        article = Article(title='A', slug='a', body_md='body', created_at=utils.parse_date('2025-01-01'))
        with mock.patch.object(Article, 'save', side_effect=OperationalError('disk full')):
            with self.assertRaises(PersistenceError):
                apply_tags(article, ['fresh'])
        self.assertFalse(Tag.objects.filter(name='fresh').exists())
        self.assertIsNone(article.pk)

    def test_slug_collision(self):
        first = create_article('Duplicate', 'body', [])
        second = create_article('Duplicate', 'body', [])
        self.assertEqual(first.slug, 'duplicate')
        self.assertEqual(second.slug, 'duplicate-1')

    def test_long_title_slug_fits_column(self):
        first = create_article('a' * 300, 'body', [])
        second = create_article('a' * 300, 'body', [])
        self.assertEqual(len(first.slug), 300)
        self.assertEqual(len(second.slug), 300)
        self.assertTrue(second.slug.endswith('-1'))

    def test_edit_keeps_truncated_slug(self):
        create_article('a' * 300, 'body', [])
        second = create_article('a' * 300, 'body', [])
        slug = second.slug
        update_article(second, 'a' * 300, 'body', ['go'])
        self.assertEqual(second.slug, slug)

    def test_lost_race_inside_apply_tags(self):
        winner = Tag.objects.create(name='rust')
        article = create_article('A', 'body', ['go', 'Rust'], registry=StaleReadRegistry(stale_reads=1))
        article.refresh_from_db()
        self.assertEqual(article.tag_names, ['go', 'rust'])
        self.assertEqual(article.tag_links.get(tag__name='rust').tag_id, winner.pk)
        self.assertEqual(Tag.objects.filter(name='rust').count(), 1)

    def test_body_rendered(self):
        article = create_article('A', '# Hello\n\n<script>x</script>', [])
        self.assertIn('<h1>Hello</h1>', article.body_html)
        self.assertNotIn('<script>', article.body_html)


# ──────────────────────────────────────────────
# 단위 테스트: utils 함수
# ──────────────────────────────────────────────

class MakeSlugTest(TestCase):
    def test_basic(self):
        self.assertEqual(utils.make_slug('Hello World'), 'hello-world')

    def test_korean(self):
        self.assertEqual(utils.make_slug('파이썬 튜토리얼'), '파이썬-튜토리얼')

    def test_empty(self):
        self.assertEqual(utils.make_slug('!!!'), 'untitled')


class ExtractFrontmatterTest(TestCase):
    def test_with_frontmatter(self):
        content = "---\ntitle: Test\ntags: Python, Django\n---\n\nHello body"
        meta, body = utils.extract_frontmatter_and_body(content)
        self.assertEqual(meta['title'], 'Test')
        self.assertEqual(meta['tags'], 'Python, Django')
        self.assertEqual(body, 'Hello body')

    def test_without_frontmatter(self):
        content = "Just plain markdown content"
        meta, body = utils.extract_frontmatter_and_body(content)
        self.assertEqual(meta, {})
        self.assertEqual(body, content)


class ProcessUploadedMdTest(TestCase):
    def test_string_tags(self):
        content = "---\ntitle: My Post\ndate: 2025-06-15\ntags: Python, Django\n---\n\n본문입니다."
        slug, error = utils.process_uploaded_md(SimpleUploadedFile('my-post.md', content.encode('utf-8')))
        self.assertIsNone(error)
        self.assertEqual(Article.objects.get(slug=slug).tag_names, ['python', 'django'])

    def test_list_tags(self):
        content = "---\ntitle: My Post\ntags: [Python, Django]\n---\n\nBody"
        slug, error = utils.process_uploaded_md(SimpleUploadedFile('my-post.md', content.encode('utf-8')))
        self.assertIsNone(error)
        self.assertEqual(Article.objects.get(slug=slug).tag_names, ['python', 'django'])

    def test_fallback_title(self):
        slug, error = utils.process_uploaded_md(SimpleUploadedFile('my-article.md', b'# Heading'))
        self.assertIsNone(error)
        self.assertEqual(slug, 'my-article')

    def test_long_title(self):
        content = f"---\ntitle: {'a' * 301}\n---\n\nBody"
        slug, error = utils.process_uploaded_md(SimpleUploadedFile('long.md', content.encode('utf-8')))
        self.assertIsNone(slug)
        self.assertIn('300', error)

    def test_non_utf8(self):
        f = SimpleUploadedFile('bad.md', '한글테스트'.encode('euc-kr'))
        slug, error = utils.process_uploaded_md(f)
        self.assertIsNone(slug)
        self.assertIn('UTF-8', error)

    def test_invalid_tags_type(self):
        content = "---\ntitle: Bad\ntags:\n  python: true\n---\n\nBody"
        slug, error = utils.process_uploaded_md(SimpleUploadedFile('bad.md', content.encode('utf-8')))
        self.assertIsNone(slug)
        self.assertIn('tags', error)
        self.assertEqual(Article.objects.count(), 0)


# ──────────────────────────────────────────────
# API 엔드포인트 테스트
# ──────────────────────────────────────────────

class APIArticleTest(TestCase):
    def _post(self, url, payload, method='post'):
        return getattr(self.client, method)(
            url,
            data=json.dumps(payload),
            content_type='application/json',
        )

    def test_create(self):
        resp = self._post('/api/articles/', {
            'title': 'Hello',
            'body': 'Body',
            'tags': ['  Food ', 'food', 'COOKING'],
        })
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()['tags'], ['food', 'cooking'])

    def test_create_rejects_string_tags(self):
        resp = self._post('/api/articles/', {'title': 'Hello', 'body': 'Body', 'tags': 'go, rust'})
        self.assertEqual(resp.status_code, 400)
        self.assertIn('tags', resp.json()['error'])
        self.assertEqual(Article.objects.count(), 0)

    def test_create_requires_title_and_body(self):
        resp = self._post('/api/articles/', {'title': '', 'body': 'Body', 'tags': []})
        self.assertEqual(resp.status_code, 400)

    def test_create_rejects_long_title(self):
        resp = self._post('/api/articles/', {'title': 'a' * 301, 'body': 'Body', 'tags': ['go']})
        self.assertEqual(resp.status_code, 400)
        self.assertIn('300', resp.json()['error'])
        self.assertEqual(Article.objects.count(), 0)
        self.assertEqual(Tag.objects.count(), 0)

    def test_create_invalid_json(self):
        resp = self.client.post('/api/articles/', data='not json', content_type='application/json')
        self.assertEqual(resp.status_code, 400)

    def test_create_persistence_error(self):
        with mock.patch('articles.api.create_article', side_effect=PersistenceError('down')):
            resp = self._post('/api/articles/', {'title': 'Hello', 'body': 'Body', 'tags': ['go']})
        self.assertEqual(resp.status_code, 503)
        self.assertIn('error', resp.json())

    def test_edit_replaces_tags(self):
        article = create_article('Hello', 'Body', ['go', 'rust'])
        resp = self._post(f'/api/articles/{article.slug}/', {
            'title': 'Hello',
            'body': 'Body',
            'tags': ['go'],
        }, method='put')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['tags'], ['go'])

    def test_detail(self):
        article = create_article('Hello', 'Body', ['go'])
        resp = self.client.get(f'/api/articles/{article.slug}/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['tags'], ['go'])
        self.assertIn('body', resp.json())

    def test_detail_not_found(self):
        resp = self.client.get('/api/articles/nonexistent/')
        self.assertEqual(resp.status_code, 404)

    def test_list_tag_filter(self):
        create_article('A', 'Body', ['go', 'rust'])
        create_article('B', 'Body', ['zig'])
        resp = self.client.get('/api/articles/?tag=RUST')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual([a['title'] for a in data['articles']], ['A'])
        self.assertEqual(data['pagination']['total'], 1)

    def test_list_query_count_independent_of_page_size(self):
        create_article('A', 'Body', ['go', 'rust'])
        with CaptureQueriesContext(connection) as one:
            self.client.get('/api/articles/')
        create_article('B', 'Body', ['rust', 'zig'])
        create_article('C', 'Body', ['zig'])
        with CaptureQueriesContext(connection) as three:
            resp = self.client.get('/api/articles/')
        self.assertEqual(len(three), len(one))
        tags_by_title = {a['title']: a['tags'] for a in resp.json()['articles']}
        self.assertEqual(tags_by_title, {
            'A': ['go', 'rust'], 'B': ['rust', 'zig'], 'C': ['zig'],
        })

    def test_list_pagination(self):
        for i in range(3):
            create_article(f'Post {i}', 'Body', [])
        resp = self.client.get('/api/articles/?per_page=2&page=2')
        data = resp.json()
        self.assertEqual(len(data['articles']), 1)
        self.assertEqual(data['pagination']['total_pages'], 2)


class APITagTest(TestCase):
    def test_popular_tags(self):
        create_article('A', 'Body', ['go', 'rust'])
        create_article('B', 'Body', ['rust', 'zig'])
        resp = self.client.get('/api/tags/popular/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['tags'], [
            {'name': 'rust', 'count': 2},
            {'name': 'go', 'count': 1},
            {'name': 'zig', 'count': 1},
        ])
        self.assertIn('no-cache', resp['Cache-Control'])

    def test_popular_tags_reflect_new_tag_immediately(self):
        self.assertEqual(self.client.get('/api/tags/popular/').json()['tags'], [])
        create_article('A', 'Body', ['brand new'])
        self.assertEqual(
            self.client.get('/api/tags/popular/').json()['tags'],
            [{'name': 'brand new', 'count': 1}],
        )

    def test_popular_tags_limit(self):
        create_article('A', 'Body', ['go', 'rust'])
        resp = self.client.get('/api/tags/popular/?limit=1')
        self.assertEqual(len(resp.json()['tags']), 1)

    def test_tag_list(self):
        create_article('A', 'Body', ['rust', 'go'])
        resp = self.client.get('/api/tags/')
        self.assertEqual(resp.json()['tags'], ['go', 'rust'])

    def test_tag_list_post_not_allowed(self):
        resp = self.client.post('/api/tags/')
        self.assertEqual(resp.status_code, 405)


class APIUploadTest(TestCase):
    def test_upload_md(self):
        content = "---\ntitle: API Upload\ntags: go, Rust\n---\n\nBody"
        resp = self.client.post('/api/upload-post/', {'file': SimpleUploadedFile('test.md', content.encode('utf-8'))})
        self.assertEqual(resp.status_code, 200)
        slug = resp.json()['slug']
        self.assertEqual(Article.objects.get(slug=slug).tag_names, ['go', 'rust'])

    def test_upload_no_file(self):
        resp = self.client.post('/api/upload-post/', {})
        self.assertEqual(resp.status_code, 400)

    def test_upload_invalid_extension(self):
        resp = self.client.post('/api/upload-post/', {'file': SimpleUploadedFile('test.txt', b'Hello')})
        self.assertEqual(resp.status_code, 400)
        self.assertIn('.md', resp.json()['error'])

    def test_get_method_not_allowed(self):
        resp = self.client.get('/api/upload-post/')
        self.assertEqual(resp.status_code, 405)


# ──────────────────────────────────────────────
# 인기 태그 context processor / 관리 명령
# ──────────────────────────────────────────────

class PopularTagsContextProcessorTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()

    @override_settings(POPULAR_TAGS_LIMIT=1)
    def test_context(self):
        create_article('A', 'Body', ['go', 'rust'])
        create_article('B', 'Body', ['rust'])
        context = popular_tags(self.factory.get('/', {'tag': ' Rust '}))
        self.assertEqual(context['popular_tags'], [('rust', 2)])
        self.assertEqual(context['all_tag_items'], [('rust', 2), ('go', 1)])
        self.assertEqual(context['all_tags'], ['rust', 'go'])
        self.assertEqual(context['current_tag'], 'rust')


class PruneTagsCommandTest(TestCase):
    def setUp(self):
        create_article('A', 'Body', ['go'])
        registry.resolve_or_create('orphan')

    def test_dry_run(self):
        out = StringIO()
        call_command('prune_tags', '--dry-run', stdout=out)
        self.assertIn('orphan', out.getvalue())
        self.assertTrue(Tag.objects.filter(name='orphan').exists())

    def test_prune(self):
        out = StringIO()
        call_command('prune_tags', stdout=out)
        self.assertIn('1', out.getvalue())
        self.assertFalse(Tag.objects.filter(name='orphan').exists())
        self.assertTrue(Tag.objects.filter(name='go').exists())
