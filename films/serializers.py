from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from films.models import Film, FilmCountry, Genre
from films.services.save_film import create_film, update_film


class GenreSerializer(serializers.ModelSerializer):
    """Сериализатор жанра"""

    class Meta:
        model = Genre
        fields = ["id", "title"]


class FilmCountrySerializer(serializers.ModelSerializer):
    """Вложенные атрибуты страны: id - существующая запись, _destroy - удалить ее"""
    id = serializers.IntegerField(required=False)
    country = serializers.CharField(max_length=3, required=False)
    _destroy = serializers.BooleanField(required=False, default=False, write_only=True)

    class Meta:
        model = FilmCountry
        fields = ["id", "country", "_destroy"]

    def validate(self, attrs):
        """Для новой страны обязателен код"""
        if not attrs.get("id") and not attrs.get("_destroy") and not attrs.get("country"):
            raise serializers.ValidationError({"country": ["Обязательное поле"]})
        return attrs


class FilmSerializer(serializers.ModelSerializer):
    """Сериализатор фильма: хранимые поля и вычисляемые (язык оригинала, год, страны)"""
    title = serializers.CharField(max_length=500)
    origin_title = serializers.CharField(read_only=True)
    locale = serializers.CharField(max_length=10, required=False)
    year = serializers.IntegerField(read_only=True)
    genres = serializers.PrimaryKeyRelatedField(many=True, queryset=Genre.objects.all(), required=False)
    countries = serializers.SerializerMethodField()
    film_countries = FilmCountrySerializer(many=True, required=False)

    class Meta:
        model = Film
        fields = [
            "id",
            "title",
            "origin_title",
            "locale",
            "year",
            "rating",
            "date",
            "avatar",
            "genres",
            "countries",
            "film_countries",
            "created_at",
        ]
        read_only_fields = ("id", "created_at")

    def get_countries(self, obj):
        return obj.countries()

    def create(self, validated_data):
        """Создает фильм; язык оригинала берется из locale или по умолчанию"""
        countries = [
            item["country"]
            for item in validated_data.pop("film_countries", [])
            if item.get("country") and not item.get("_destroy")
        ]
        locale = validated_data.pop("locale", "")
        try:
            return create_film(countries=countries, locale_code=locale, **validated_data)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict)

    def update(self, instance, validated_data):
        """Обновляет фильм; язык оригинала после создания не меняется"""
        validated_data.pop("locale", None)
        countries_attributes = validated_data.pop("film_countries", [])
        try:
            return update_film(instance, countries_attributes=countries_attributes, **validated_data)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict)
        except FilmCountry.DoesNotExist as e:
            raise serializers.ValidationError({"film_countries": [str(e)]})
