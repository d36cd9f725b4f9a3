from django.core.management.base import BaseCommand

from articles.registry import registry


class Command(BaseCommand):
    help = '어떤 글도 참조하지 않는 태그를 삭제합니다.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='삭제하지 않고 대상 태그만 출력합니다.',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            names = list(registry.unreferenced().values_list('name', flat=True))
            for name in names:
                self.stdout.write(name)
            self.stdout.write(f'삭제 대상 태그 {len(names)}개')
            return

        deleted = registry.prune_unreferenced()
        self.stdout.write(self.style.SUCCESS(f'태그 {deleted}개를 삭제했습니다.'))
