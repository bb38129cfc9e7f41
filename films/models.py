import logging
from datetime import MAXYEAR, MINYEAR

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import OuterRef, Subquery
from django.db.models.functions import Coalesce
from django.utils import translation

from films.countries import country_resolver
from films.services.countries import countries_destroy
from films.translations import fallback_locales, get_default_locale, translation_store

logger = logging.getLogger("filmcatalog.films")

RATING_MESSAGE = "Оценка должна быть в диапазоне 1..10"
SORT_DIRECTIONS = ("asc", "desc")
MAX_DB_INT = 2 ** 63 - 1


def _ordering(field: str, direction) -> str:
    """Переводит направление сортировки asc/desc в аргумент order_by"""
    direction = str(direction).lower()
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Неизвестное направление сортировки: {direction}")
    return field if direction == "asc" else f"-{field}"


def _bounded_int(value, low: int, high: int) -> int:
    """int(value) в пределах [low, high]; иначе ValueError еще до выполнения запроса"""
    number = int(value)
    if not low <= number <= high:
        raise ValueError(f"Значение {number} вне диапазона {low}..{high}")
    return number


class Genre(models.Model):
    """Класс модели жанра"""
    title = models.CharField(max_length=100, verbose_name="Название")

    def __str__(self):
        return self.title

    class Meta:
        verbose_name = "жанр"
        verbose_name_plural = "жанры"
        ordering = ["title"]


class FilmQuerySet(models.QuerySet):
    """Запросы каталога: поиск, фильтры и сортировка"""

    def recent(self):
        return self.order_by("-created_at")

    def with_translations(self):
        return self.prefetch_related("translations")

    def search(self, text):
        """
        Поиск подстроки в названии без учета регистра (для любого алфавита).
        Ищет по тому же названию, которое показывает Film.title: язык пользователя ->
        язык по умолчанию -> любой непустой перевод
        """
        if text is None:
            return self.with_translations()
        translations = FilmTranslation.objects.filter(film=OuterRef("pk")).exclude(search_title="")
        titles = [
            Subquery(translations.filter(locale=code).values("search_title")[:1])
            for code in fallback_locales(translation.get_language())
        ]
        titles.append(Subquery(translations.order_by("id").values("search_title")[:1]))
        return (
            self.with_translations()
            .annotate(display_search_title=Coalesce(*titles))
            .filter(display_search_title__contains=str(text).casefold())
        )

    def by_year(self, year):
        return self.filter(date__year=_bounded_int(year, MINYEAR, MAXYEAR))

    def by_country(self, code):
        return self.filter(film_countries__country=code)

    def by_rating(self, rating):
        return self.filter(rating=_bounded_int(rating, -MAX_DB_INT, MAX_DB_INT))

    def by_genres(self, genres):
        """Фильмы хотя бы с одним из жанров; фильм повторяется для каждого совпавшего жанра"""
        if isinstance(genres, (str, int)):
            genres = [genres]
        genre_ids = [_bounded_int(genre_id, -MAX_DB_INT, MAX_DB_INT) for genre_id in genres]
        return self.filter(film_genres__genre__in=genre_ids)

    def filtered(self, filters):
        """
        Применяет фильтры title/year/country/rating/genres (через AND).
        Любая ошибка при сборке фильтров - возвращает запрос без фильтров
        """
        if not filters:
            return self
        films = self
        try:
            if "title" in filters:
                films = films.search(filters["title"])
            if "year" in filters:
                films = films.by_year(filters["year"])
            if "country" in filters:
                films = films.by_country(filters["country"])
            if "rating" in filters:
                films = films.by_rating(filters["rating"])
            if "genres" in filters:
                films = films.by_genres(filters["genres"])
        except Exception as e:
            logger.warning("FilmFilter FAIL filters=%s: %s", filters, e)
            return self
        return films

    def sorted(self, sort):
        """
        Сортировка по году выхода или по оценке (year важнее rating).
        По умолчанию и при любой ошибке - сначала новые
        """
        sort = sort or {}
        try:
            if sort.get("year"):
                return self.order_by(_ordering("date", sort["year"]))
            if sort.get("rating"):
                return self.order_by(_ordering("rating", sort["rating"]))
        except Exception as e:
            logger.warning("FilmSort FAIL sort=%s: %s", sort, e)
        return self.recent()


class Film(models.Model):
    """Класс модели фильма"""
    locale_code = models.CharField(max_length=10, blank=True, verbose_name="Язык оригинала")
    rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[
            MinValueValidator(1, message=RATING_MESSAGE),
            MaxValueValidator(10, message=RATING_MESSAGE),
        ],
        verbose_name="Оценка",
    )
    date = models.DateField(null=True, blank=True, verbose_name="Дата выхода")
    avatar = models.ImageField(upload_to="films/avatars/", blank=True, null=True, verbose_name="Постер")
    genres = models.ManyToManyField(
        to="films.Genre",
        through="FilmGenre",
        related_name="films",
        blank=True,
        verbose_name="Жанры",
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Дата создания")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="Дата обновления")

    objects = FilmQuerySet.as_manager()

    def __str__(self):
        return self.title or f"Фильм #{self.pk}"

    @property
    def locale(self) -> str:
        """Язык оригинала фильма или язык по умолчанию"""
        return self.locale_code or get_default_locale()

    @property
    def title(self) -> str | None:
        return self.get_title()

    @title.setter
    def title(self, value):
        self.set_title(value)

    @property
    def origin_title(self) -> str | None:
        """Название на языке оригинала, не зависит от языка пользователя"""
        return self.get_title(self.locale)

    @property
    def year(self) -> int | None:
        return self.date.year if self.date else None

    @property
    def pending_titles(self) -> dict:
        """Названия, которые будут записаны при сохранении: {язык: название}"""
        return self.__dict__.setdefault("_pending_titles", {})

    def get_title(self, locale: str | None = None, store=None) -> str | None:
        """
        Название на указанном (или текущем) языке.
        Пустые переводы пропускаются: язык -> язык по умолчанию -> любой сохраненный перевод
        """
        store = store or translation_store
        titles = {**store.read_all(self), **self.pending_titles}
        for code in fallback_locales(locale or translation.get_language()):
            if titles.get(code):
                return titles[code]
        return next((title for title in titles.values() if title), None)

    def set_title(self, value: str, locale: str | None = None):
        """Запоминает название для текущего (или указанного) языка до сохранения"""
        self.pending_titles[locale or translation.get_language() or get_default_locale()] = value

    def locale_default(self, default_locale: str | None = None):
        """Язык оригинала задается один раз, при создании"""
        if not self.locale_code:
            self.locale_code = default_locale or get_default_locale()

    def countries(self, resolver=None) -> list[dict]:
        """Страны фильма: [{"id": код alpha-2, "name": название на текущем языке}]"""
        resolver = resolver or country_resolver
        return [resolver.resolve(f_c.country) for f_c in self.film_countries.all()]

    def countries_destroy(self, film_countries=None) -> list:
        """Удаляет вытесненные страны фильма перед обновлением"""
        if film_countries is None:
            film_countries = list(self.film_countries.all())
        return countries_destroy(film_countries)

    def clean(self):
        super().clean()
        if not self.get_title():
            raise ValidationError({"title": "Обязательное поле"})

    def save(self, *args, **kwargs):
        """Сохраняет фильм и накопленные названия; язык оригинала задается при создании"""
        if self._state.adding:
            self.locale_default()
        super().save(*args, **kwargs)
        for locale, title in self.__dict__.pop("_pending_titles", {}).items():
            translation_store.write(self, locale, title)

    class Meta:
        verbose_name = "фильм"
        verbose_name_plural = "фильмы"
        indexes = [
            models.Index(fields=["-created_at"]),
        ]


class FilmTranslation(models.Model):
    """Название фильма на одном языке"""
    film = models.ForeignKey(to="films.Film", on_delete=models.CASCADE, related_name="translations")
    locale = models.CharField(max_length=10, verbose_name="Язык")
    title = models.CharField(max_length=500, verbose_name="Название")
    search_title = models.TextField(blank=True, editable=False)  # casefold() от title для поиска

    def __str__(self):
        return f"{self.locale}: {self.title}"

    def save(self, *args, **kwargs):
        """Обновляет копию названия для поиска без учета регистра"""
        self.search_title = (self.title or "").casefold()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "title" in update_fields:
            kwargs["update_fields"] = {*update_fields, "search_title"}
        super().save(*args, **kwargs)

    class Meta:
        unique_together = ("film", "locale")
        ordering = ["id"]


class FilmGenre(models.Model):
    """Промежуточная таблица: связь фильма и жанра"""
    film = models.ForeignKey(to="films.Film", on_delete=models.CASCADE, related_name="film_genres")
    genre = models.ForeignKey(to="films.Genre", on_delete=models.CASCADE, related_name="film_genres")

    class Meta:
        unique_together = ("film", "genre")


class FilmCountry(models.Model):
    """Страна производства фильма (код ISO 3166 alpha-2 или alpha-3)"""
    film = models.ForeignKey(to="films.Film", on_delete=models.CASCADE, related_name="film_countries")
    country = models.CharField(max_length=3, verbose_name="Страна")

    def __str__(self):
        return self.country

    class Meta:
        verbose_name = "страна фильма"
        verbose_name_plural = "страны фильма"
        ordering = ["id"]
