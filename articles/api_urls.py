from django.urls import path, re_path
from . import api

app_name = 'api'

# 한글 slug를 허용하는 패턴
_SLUG = r'(?P<slug>[-\w]+)'

urlpatterns = [
    path('tags/', api.api_tag_list, name='tag_list'),
    path('tags/popular/', api.api_popular_tags, name='popular_tags'),
    path('articles/', api.api_article_list, name='article_list'),
    re_path(rf'articles/{_SLUG}/$', api.api_article_detail, name='article_detail'),
    path('upload-post/', api.api_upload_post, name='upload_post'),
]
