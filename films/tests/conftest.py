from datetime import date, datetime, timezone

import pytest

from films.models import Film, FilmCountry, Genre


@pytest.fixture
def horror(db):
    return Genre.objects.create(title="Horror")


@pytest.fixture
def drama(db):
    return Genre.objects.create(title="Drama")


@pytest.fixture
def comedy(db):
    return Genre.objects.create(title="Comedy")


@pytest.fixture
def make_film(db):
    """Фабрика фильмов: название на текущем языке, страны и жанры"""

    def _make_film(title="Test film", countries=(), genres=(), **attrs):
        film = Film.objects.create(title=title, **attrs)
        for code in countries:
            FilmCountry.objects.create(film=film, country=code)
        film.genres.add(*genres)
        return film

    return _make_film


@pytest.fixture
def film(make_film, horror):
    return make_film(
        title="The Shining",
        rating=8,
        date=date(1980, 5, 23),
        countries=["US"],
        genres=[horror],
    )


@pytest.fixture
def catalog(make_film, horror, drama, comedy):
    """Три фильма с разными годами, оценками, странами и жанрами; создавались по порядку"""
    shining = make_film(
        title="The Shining", rating=8, date=date(1980, 5, 23), countries=["US"], genres=[horror]
    )
    stalker = make_film(
        title="Stalker", rating=9, date=date(1979, 5, 25), countries=["RU"], genres=[drama]
    )
    amelie = make_film(
        title="Amelie", rating=7, date=date(2001, 4, 25), countries=["FR", "DE"], genres=[comedy, drama]
    )
    for day, item in enumerate([shining, stalker, amelie], start=1):
        Film.objects.filter(pk=item.pk).update(created_at=datetime(2024, 1, day, tzinfo=timezone.utc))
    return {"shining": shining, "stalker": stalker, "amelie": amelie}


class FakeCountryResolver:
    """Резолвер стран без django-countries"""

    def resolve(self, code, locale=None):
        return {"id": code[:2].upper(), "name": f"country-{code}"}


@pytest.fixture
def fake_resolver():
    return FakeCountryResolver()
