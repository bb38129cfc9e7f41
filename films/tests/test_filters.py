from django.utils import translation

import pytest

from films.models import Film


def pks(films):
    return sorted(film.pk for film in films)


@pytest.mark.django_db
@pytest.mark.parametrize("filters", [None, {}])
def test_no_filters_returns_all(catalog, filters):
    """Без фильтров возвращаются все фильмы"""
    assert Film.objects.filtered(filters).count() == 3


@pytest.mark.django_db
def test_filter_by_title_case_insensitive(catalog):
    """Поиск по подстроке названия без учета регистра"""
    assert pks(Film.objects.filtered({"title": "SHIN"})) == [catalog["shining"].pk]


@pytest.mark.django_db
def test_filter_by_empty_title_matches_all(catalog):
    """Пустая строка - тоже фильтр, но под него подходят все фильмы"""
    assert Film.objects.filtered({"title": ""}).count() == 3


@pytest.mark.django_db
def test_filter_by_title_none_is_ignored(catalog):
    """title=None не ограничивает выборку"""
    assert Film.objects.filtered({"title": None}).count() == 3


@pytest.mark.django_db
@pytest.mark.parametrize("year", [1979, "1979"])
def test_filter_by_year(catalog, year):
    """Фильтр по году выхода"""
    assert pks(Film.objects.filtered({"year": year})) == [catalog["stalker"].pk]


@pytest.mark.django_db
def test_filter_by_country(catalog):
    """Фильтр по коду страны"""
    assert pks(Film.objects.filtered({"country": "FR"})) == [catalog["amelie"].pk]


@pytest.mark.django_db
def test_filter_by_rating(catalog):
    """Оценка должна совпадать точно"""
    assert pks(Film.objects.filtered({"rating": 9})) == [catalog["stalker"].pk]
    assert Film.objects.filtered({"rating": 10}).count() == 0


@pytest.mark.django_db
def test_filter_by_genres(catalog, horror, drama):
    """Фильмы хотя бы с одним из жанров"""
    films = Film.objects.filtered({"genres": [horror.pk, drama.pk]})

    assert set(pks(films)) == {film.pk for film in catalog.values()}


@pytest.mark.django_db
def test_filter_by_genres_keeps_join_duplicates(catalog, comedy, drama):
    """Фильм повторяется для каждого совпавшего жанра"""
    films = Film.objects.filtered({"genres": [comedy.pk, drama.pk]})

    assert pks(films) == sorted([catalog["stalker"].pk, catalog["amelie"].pk, catalog["amelie"].pk])


@pytest.mark.django_db
def test_filters_combined_with_and(catalog):
    """Фильтры объединяются через AND"""
    assert set(pks(Film.objects.filtered({"title": "e", "rating": 7}))) == {catalog["amelie"].pk}
    assert Film.objects.filtered({"title": "stalker", "year": 2001}).count() == 0
    assert pks(Film.objects.filtered({"title": "stalker", "year": 1979, "country": "RU"})) == [
        catalog["stalker"].pk
    ]


@pytest.mark.django_db
@pytest.mark.parametrize(
    "filters",
    [
        {"year": "abc"},
        {"year": 0},
        {"year": 10000},
        {"rating": 10 ** 20},
        {"genres": [10 ** 20]},
        {"rating": "ten"},
        {"genres": ["drama"]},
        {"country": "US", "year": None},
        "not a mapping",
    ],
)
def test_malformed_filters_return_all(catalog, filters):
    """Ошибка при сборке фильтров - возвращаются все фильмы, без исключения"""
    assert Film.objects.filtered(filters).count() == 3


@pytest.mark.django_db
def test_malformed_filter_is_logged(catalog, caplog):
    """Проглоченная ошибка фильтра пишется в лог"""
    Film.objects.filtered({"year": "abc"})

    assert "FilmFilter FAIL" in caplog.text


@pytest.mark.django_db
def test_filtered_chains_on_queryset(catalog):
    """filtered работает и на уже отфильтрованном запросе"""
    films = Film.objects.filter(rating__gte=8).filtered({"year": "abc"})

    assert films.count() == 2


@pytest.mark.django_db
@pytest.mark.parametrize("filters", [None, {}])
def test_absent_filters_are_not_logged(catalog, caplog, filters):
    """Отсутствие фильтров - не ошибка, в лог ничего не пишется"""
    Film.objects.filtered(filters)

    assert "FilmFilter FAIL" not in caplog.text


@pytest.mark.django_db
def test_filter_by_title_cyrillic_case_insensitive(make_film):
    """Поиск без учета регистра работает и для кириллицы"""
    stalker = make_film(title="Сталкер")
    make_film(title="Солярис")

    assert pks(Film.objects.filtered({"title": "сталкер"})) == [stalker.pk]
    assert pks(Film.objects.filtered({"title": "ТАЛК"})) == [stalker.pk]


@pytest.mark.django_db
def test_filter_by_title_uses_displayed_fallback_title(make_film):
    """Фильм с названием только на другом языке находится по тому названию, которое видит пользователь"""
    with translation.override("de"):
        film = make_film(title="Der Himmel über Berlin")

    assert Film.objects.get(pk=film.pk).title == "Der Himmel über Berlin"
    assert pks(Film.objects.filtered({"title": "HIMMEL"})) == [film.pk]


@pytest.mark.django_db
def test_filter_by_title_ignores_hidden_translations(make_film):
    """Перевод, который не показывается пользователю, в поиске не участвует"""
    film = make_film(title="Сталкер")
    with translation.override("en"):
        film.set_title("Stalker")
        film.save()

    assert Film.objects.filtered({"title": "stalker"}).count() == 0
    with translation.override("en"):
        assert pks(Film.objects.filtered({"title": "stalker"})) == [film.pk]
