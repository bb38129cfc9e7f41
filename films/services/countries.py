import logging

logger = logging.getLogger("filmcatalog.films")


def split_countries(film_countries) -> tuple[list, list]:
    """
    Делит страны фильма на новые и старые.
    Новая - еще не сохранена в БД и ее код встречается среди новых впервые,
    все остальные (сохраненные и повторы несохраненных) - старые
    """
    names = []
    new_countries = []
    old_countries = []

    for f_c in film_countries:
        if f_c.pk is None and f_c.country not in names:
            names.append(f_c.country)
            new_countries.append(f_c)
        else:
            old_countries.append(f_c)

    return new_countries, old_countries


# TODO: при добавлении хотя бы одной новой страны удаляются все старые - уточнить, нужно ли это продукту
def countries_destroy(film_countries) -> list:
    """
    Если есть и новые, и старые страны - удаляет все старые:
    сохраненные удаляются из БД, несохраненные дубли просто не записываются.
    Возвращает удаленные объекты
    """
    new_countries, old_countries = split_countries(film_countries)

    if not new_countries or not old_countries:
        return []

    for f_c in old_countries:
        if f_c.pk is not None:
            f_c.delete()

    logger.info(
        "Countries DESTROY: new=%s destroyed=%s",
        [f_c.country for f_c in new_countries],
        [f_c.country for f_c in old_countries],
    )
    return old_countries
