import logging
from contextlib import nullcontext
from typing import Protocol

from django.utils import translation
from django_countries import countries

logger = logging.getLogger("filmcatalog.films")


class CountryNameResolver(Protocol):
    def resolve(self, code: str, locale: str | None = None) -> dict:
        ...


class DjangoCountriesResolver:
    """Нормализует код страны до alpha-2 и переводит название через django-countries"""

    def resolve(self, code: str, locale: str | None = None) -> dict:
        """
        Возвращает {"id": код alpha-2, "name": название страны}.
        Название на языке locale, по умолчанию - на текущем языке пользователя
        """
        alpha2 = countries.alpha2(code)
        if not alpha2:
            logger.warning("Country UNKNOWN: code=%s", code)
            return {"id": str(code).upper(), "name": None}

        with translation.override(locale) if locale else nullcontext():
            name = str(countries.name(alpha2))
        return {"id": alpha2, "name": name}


country_resolver = DjangoCountriesResolver()
