import logging

from django.db import transaction

from films.models import Film, FilmCountry

logger = logging.getLogger("filmcatalog.films")

DESTROY_FLAGS = {"1", "true", "t", "on"}


def _is_destroy(value) -> bool:
    """Флаг _destroy из вложенных атрибутов: True, 1, "1", "true"..."""
    return str(value).lower() in DESTROY_FLAGS


@transaction.atomic
def create_film(*, title: str, countries=(), genres=(), default_locale: str | None = None, **attrs) -> Film:
    """
    Создает фильм вместе с названием, странами и жанрами.
    Ошибка валидации (ValidationError) - в БД ничего не записывается
    """
    film = Film(**attrs)
    film.set_title(title)
    film.locale_default(default_locale)
    film.full_clean()
    film.save()

    for code in countries:
        FilmCountry.objects.create(film=film, country=code)
    film.genres.set(genres)

    logger.info("Film CREATE: film=%s locale=%s", film.pk, film.locale)
    return film


def assign_countries_attributes(film: Film, countries_attributes) -> tuple[list, list]:
    """
    Применяет вложенные атрибуты стран в памяти, ничего не сохраняя:
    {"id": 1, "country": "DE"} - изменить существующую, {"id": 1, "_destroy": True} - удалить,
    {"country": "US"} - добавить новую.
    Возвращает (все страны фильма, помеченные на удаление)
    """
    existing = list(film.film_countries.all())
    by_id = {f_c.pk: f_c for f_c in existing}
    new_countries = []
    marked = []

    for attrs in countries_attributes:
        f_c_id = attrs.get("id")
        destroy = _is_destroy(attrs.get("_destroy", False))
        if f_c_id:
            f_c = by_id.get(int(f_c_id))
            if f_c is None:
                raise FilmCountry.DoesNotExist(f"Страна id={f_c_id} не найдена у фильма id={film.pk}")
            if destroy:
                marked.append(f_c)
            elif "country" in attrs:
                f_c.country = attrs["country"]
        elif not destroy:
            new_countries.append(FilmCountry(film=film, country=attrs.get("country")))

    return existing + new_countries, marked


@transaction.atomic
def update_film(film: Film, *, countries_attributes=(), genres=None, title: str | None = None, **attrs) -> Film:
    """
    Обновляет фильм и его страны: сначала применяет вложенные атрибуты,
    затем удаляет вытесненные страны, затем валидирует и сохраняет.
    Ошибка валидации - rollback, в том числе удаленных стран
    """
    for field, value in attrs.items():
        setattr(film, field, value)
    if title is not None:
        film.set_title(title)

    film_countries, marked = assign_countries_attributes(film, countries_attributes)
    destroyed = film.countries_destroy(film_countries)

    film.full_clean()
    film.save()

    gone = {id(f_c) for f_c in destroyed}
    for f_c in marked:
        if id(f_c) not in gone:
            f_c.delete()
            gone.add(id(f_c))
    for f_c in film_countries:
        if id(f_c) not in gone:
            f_c.full_clean(exclude=["film"])
            f_c.save()

    if genres is not None:
        film.genres.set(genres)

    logger.info(
        "Film UPDATE: film=%s countries=%s destroyed=%s",
        film.pk,
        [f_c.country for f_c in film_countries if id(f_c) not in gone],
        len(gone),
    )
    return film
