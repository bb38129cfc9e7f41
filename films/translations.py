"""
Локализованные названия фильмов.

TranslationStore - место хранения названий по языкам; по умолчанию
это таблица FilmTranslation (связь film.translations).
"""
from typing import Protocol

from django.conf import settings


def get_default_locale() -> str:
    """Язык по умолчанию для каталога"""
    return settings.FILMS_DEFAULT_LOCALE


def fallback_locales(locale: str | None, default_locale: str | None = None) -> list[str]:
    """
    Цепочка языков для поиска перевода: en-us -> en -> язык по умолчанию.
    Без дублей, порядок сохраняется
    """
    chain = []
    if locale:
        chain += [locale, locale.split("-")[0]]
    chain.append(default_locale or get_default_locale())
    return list(dict.fromkeys(chain))


class TranslationStore(Protocol):
    def read_all(self, film) -> dict[str, str]:
        ...

    def write(self, film, locale: str, title: str) -> None:
        ...


class FilmTranslationStore:
    """Названия хранятся в FilmTranslation; использует prefetch_related("translations"), если он был"""

    def read_all(self, film) -> dict[str, str]:
        if film.pk is None:
            return {}
        return {item.locale: item.title for item in film.translations.all()}

    def write(self, film, locale: str, title: str) -> None:
        film.translations.update_or_create(locale=locale, defaults={"title": title})
        getattr(film, "_prefetched_objects_cache", {}).pop("translations", None)  # сброс устаревшего prefetch


translation_store = FilmTranslationStore()
