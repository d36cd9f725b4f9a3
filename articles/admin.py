from django.contrib import admin
from django.db.models import Count

from .models import Article, ArticleTag, Tag


class ArticleTagInline(admin.TabularInline):
    model = ArticleTag
    fields = ('position', 'tag')
    readonly_fields = ('position', 'tag')
    extra = 0
    can_delete = False

    # 태그 연결은 services.apply_tags를 통해서만 변경
    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = ('title', 'slug', 'tag_list', 'created_at')
    search_fields = ('title', 'slug')
    readonly_fields = ('body_html', 'updated_at')
    inlines = [ArticleTagInline]

    def tag_list(self, obj):
        return ', '.join(obj.tag_names)
    tag_list.short_description = '태그'


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ('name', 'article_count', 'created_at')
    search_fields = ('name',)
    readonly_fields = ('name', 'created_at')

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_article_count=Count('article_links'))

    def article_count(self, obj):
        return obj._article_count
    article_count.short_description = '글 수'
    article_count.admin_order_field = '_article_count'

    def has_add_permission(self, request):
        return False
