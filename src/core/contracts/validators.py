"""
JSON Schema Contract Validators

Модуль для валидации JSON данных согласно формальным JSON Schema контрактам.
Использует библиотеку jsonschema для проверки соответствия данных схемам.

Схемы:
- allocation_config.json (конфигурация стратегии)
- asset_report.json (снапшот оценки капитала)

Загрузка конфигурации из файла проходит два слоя проверки:
JSON Schema (структура) → Pydantic AllocationConfig (инварианты).
"""

import json
from pathlib import Path
from typing import Any, Dict, Mapping

import jsonschema
from jsonschema import Draft202012Validator
from pydantic import ValidationError as PydanticValidationError

from src.core.domain.allocation_config import AllocationConfig
from src.core.errors import ConfigurationError


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Автоматически находит схемы в contracts/schema/ относительно корня проекта.
    """

    def __init__(self):
        # Определяем корень проекта (4 уровня вверх от этого файла)
        self._schema_dir = Path(__file__).parent.parent.parent.parent / "contracts" / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'asset_report')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема сама по себе невалидна
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Mapping[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Mapping[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Mapping[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class AllocationConfigValidator(ContractValidator):
    """Валидатор для allocation_config контракта."""

    def __init__(self):
        super().__init__("allocation_config")


class AssetReportValidator(ContractValidator):
    """Валидатор для asset_report контракта."""

    def __init__(self):
        super().__init__("asset_report")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_allocation_config(data: Mapping[str, Any]) -> None:
    """
    Валидация allocation_config данных.

    Raises:
        jsonschema.ValidationError: Если данные не соответствуют схеме
    """
    AllocationConfigValidator().validate(data)


def validate_asset_report(data: Mapping[str, Any]) -> None:
    """
    Валидация asset_report данных.

    Raises:
        jsonschema.ValidationError: Если данные не соответствуют схеме
    """
    AssetReportValidator().validate(data)


def parse_allocation_config(data: Mapping[str, Any]) -> AllocationConfig:
    """
    Построение AllocationConfig из mapping: JSON Schema → Pydantic.

    Args:
        data: Сырые данные конфигурации

    Returns:
        Валидный AllocationConfig

    Raises:
        ConfigurationError: Если данные нарушают схему или инварианты модели
    """
    data = dict(data)
    try:
        validate_allocation_config(data)
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"allocation config violates schema: {e.message}") from e

    try:
        return AllocationConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"invalid allocation config: {e}") from e


def load_allocation_config(path: str | Path) -> AllocationConfig:
    """
    Загрузка AllocationConfig из JSON файла.

    Args:
        path: Путь к JSON файлу конфигурации

    Returns:
        Валидный AllocationConfig

    Raises:
        ConfigurationError: Если файл не читается, не является JSON или
            конфигурация невалидна
    """
    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read allocation config {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"allocation config {config_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"allocation config {config_path} must be a JSON object")

    return parse_allocation_config(data)
