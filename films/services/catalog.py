from django.conf import settings
from django.core.paginator import Page, Paginator

from films.models import Film


def list_films(filters=None, sort=None, page=1, per_page: int | None = None) -> Page:
    """Каталог фильмов: фильтры -> сортировка -> страница (по 50 фильмов)"""
    films = (
        Film.objects.filtered(filters)
        .sorted(sort)
        .prefetch_related("translations", "film_countries", "genres")
    )
    paginator = Paginator(films, per_page or settings.FILMS_PER_PAGE)
    return paginator.get_page(page)
