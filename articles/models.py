from django.db import models

from .conf import TAG_NAME_MAX_LENGTH


class Tag(models.Model):
    """모든 글이 공유하는 canonical 태그입니다. 생성은 TagRegistry만 합니다."""
    name = models.CharField(max_length=TAG_NAME_MAX_LENGTH, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Article(models.Model):
    title = models.CharField(max_length=300)
    slug = models.SlugField(max_length=300, unique=True, allow_unicode=True)
    summary = models.TextField(blank=True, default='')
    body_md = models.TextField()
    body_html = models.TextField(blank=True, default='')
    tags = models.ManyToManyField(Tag, through='ArticleTag', related_name='articles', blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    def save(self, **kwargs):
        from .utils import render_markdown
        # 태그는 services.apply_tags에서만 연결합니다
        self.body_html = render_markdown(self.body_md) if self.body_md else ''
        super().save(**kwargs)

    @property
    def tag_names(self):
        """작성자가 입력한 순서대로 canonical 태그 이름을 반환합니다."""
        if self.pk is None:
            return []
        links = self.tag_links.all()
        # prefetch_related('tag_links__tag')로 읽은 경우 캐시를 그대로 사용
        if 'tag_links' not in getattr(self, '_prefetched_objects_cache', {}):
            links = links.select_related('tag')
        return [link.tag.name for link in links]


class ArticleTag(models.Model):
    article = models.ForeignKey(Article, on_delete=models.CASCADE, related_name='tag_links')
    tag = models.ForeignKey(Tag, on_delete=models.PROTECT, related_name='article_links')
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(fields=['article', 'tag'], name='unique_article_tag'),
        ]

    def __str__(self):
        return f'{self.article.slug} · {self.tag.name}'
