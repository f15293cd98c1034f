"""
Loader konfiguracji z automatycznym uzupełnianiem wartości domyślnych.

Reguły ruchu są data-driven - wczytywane z plików YAML:
- defaults.yaml: geometria hexa, parametry ruchu, parametry wyszukiwania
- terrain_costs.yaml: tabele kosztów terenu (land / naval)
- unit_types.yaml: typy jednostek i ich domena ruchu

Logika merge (uzupełniania defaults):
    1. Wczytaj defaults.yaml - zawiera wartości bazowe
    2. Wczytaj konkretną definicję (np. typ jednostki "cavalry")
    3. Dla każdego klucza w defaults, którego brak w definicji:
       - Użyj wartości z defaults
    4. Definicja może nadpisać defaults

Przykład:
    defaults.yaml:
        unit_defaults:
            domain: land
            movement: 2

    unit_types.yaml:
        cavalry:
            movement: 4  # nadpisuje default
            # domain nie podane -> land z defaults

Koszty nieprzekraczalne zapisujemy w YAML jako `.inf`
(yaml.safe_load zwraca float('inf')).

Użycie:
    >>> loader = ConfigLoader()               # dane wbudowane w pakiet
    >>> loader.get_movement_config()["river_crossing_cost"]
    1.0
    >>> loader.load_unit_type("galley")["domain"]
    'naval'
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, Union
import yaml
import copy


# Domyślny folder z danymi - wbudowany w pakiet
DEFAULT_DATA_PATH = Path(__file__).resolve().parent.parent / "data"


class ConfigLoader:
    """
    Ładuje konfigurację z plików YAML z automatycznym merge defaults.

    Attributes:
        data_path (Path): Ścieżka do folderu z plikami YAML
        _defaults (Dict): Cache wczytanych defaults
        _terrain_costs (Dict): Cache tabel kosztów terenu
        _unit_types (Dict): Cache wczytanych typów jednostek

    Example:
        >>> loader = ConfigLoader()
        >>> loader.load_unit_type("marine")["domain"]
        'amphibious'
    """

    def __init__(self, data_path: Union[str, Path, None] = None):
        """
        Inicjalizuje loader z ścieżką do danych.

        Args:
            data_path: Ścieżka do folderu z plikami YAML
                       (None = dane wbudowane w pakiet)
        """
        self.data_path = Path(data_path) if data_path is not None else DEFAULT_DATA_PATH
        self._defaults: Optional[Dict] = None
        self._terrain_costs: Optional[Dict] = None
        self._unit_types: Optional[Dict] = None

    # ─────────────────────────────────────────────────────────────────────────
    # WCZYTYWANIE PLIKÓW
    # ─────────────────────────────────────────────────────────────────────────

    def _load_yaml(self, filename: str) -> Dict:
        """
        Wczytuje plik YAML.

        Args:
            filename: Nazwa pliku (bez ścieżki)

        Returns:
            Dict: Zawartość pliku YAML

        Raises:
            FileNotFoundError: Jeśli plik nie istnieje
        """
        filepath = self.data_path / filename
        with open(filepath, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def get_defaults(self) -> Dict:
        """
        Zwraca słownik z wartościami domyślnymi.

        Cache'uje wczytany plik - kolejne wywołania są szybkie.
        """
        if self._defaults is None:
            self._defaults = self._load_yaml("defaults.yaml")
        return self._defaults

    def get_geometry_config(self) -> Dict:
        """Sekcja `geometry` - promienie hexa i krok elewacji."""
        return self.get_defaults().get("geometry", {})

    def get_search_config(self) -> Dict:
        """Sekcja `search` - parametry kolejki priorytetowej."""
        return self.get_defaults().get("search", {})

    def get_movement_config(self, overrides: Optional[Dict] = None) -> Dict:
        """
        Zwraca parametry ruchu (poziom morza, klify, rzeki...).

        Args:
            overrides: Opcjonalne nadpisania (merge rekurencyjny)

        Returns:
            Dict: Sekcja `movement` z defaults.yaml + nadpisania
        """
        movement = self.get_defaults().get("movement", {})
        if overrides:
            return self._deep_merge(movement, overrides)
        return copy.deepcopy(movement)

    # ─────────────────────────────────────────────────────────────────────────
    # TABELE KOSZTÓW TERENU
    # ─────────────────────────────────────────────────────────────────────────

    def get_terrain_costs(self, overrides: Optional[Dict] = None) -> Dict:
        """
        Zwraca tabele kosztów terenu dla domen land i naval.

        Args:
            overrides: Np. {"land": {"forest": 2.0}} - nadpisuje pojedyncze wpisy

        Returns:
            Dict: {"land": {teren: koszt}, "naval": {teren: koszt}}
        """
        if self._terrain_costs is None:
            self._terrain_costs = self._load_yaml("terrain_costs.yaml")

        if overrides:
            return self._deep_merge(self._terrain_costs, overrides)
        return copy.deepcopy(self._terrain_costs)

    # ─────────────────────────────────────────────────────────────────────────
    # TYPY JEDNOSTEK
    # ─────────────────────────────────────────────────────────────────────────

    def _get_all_unit_types_raw(self) -> Dict:
        """Zwraca wszystkie surowe definicje typów jednostek."""
        if self._unit_types is None:
            data = self._load_yaml("unit_types.yaml")
            self._unit_types = data.get("unit_types", {})
        return self._unit_types

    def load_unit_type(self, unit_type: str) -> Dict:
        """
        Wczytuje definicję typu jednostki z uzupełnionymi defaults.

        Proces merge:
        1. Zacznij od kopii unit_defaults
        2. Nadpisz wartościami z definicji typu
        3. Zwróć wynikowy słownik

        Raises:
            KeyError: Jeśli typ nie istnieje
        """
        unit_types = self._get_all_unit_types_raw()

        if unit_type not in unit_types:
            raise KeyError(f"Unit type '{unit_type}' not found in unit_types.yaml")

        # Deep copy defaults
        result = copy.deepcopy(self.get_defaults().get("unit_defaults", {}))

        # Merge type-specific values
        result = self._deep_merge(result, unit_types[unit_type] or {})

        result["id"] = unit_type

        return result

    def load_all_unit_types(self) -> Dict[str, Dict]:
        """Wczytuje wszystkie definicje typów jednostek (id -> definicja)."""
        unit_types = self._get_all_unit_types_raw()
        return {uid: self.load_unit_type(uid) for uid in unit_types.keys()}

    def get_unit_type_ids(self) -> list[str]:
        """Zwraca listę wszystkich ID typów jednostek."""
        return list(self._get_all_unit_types_raw().keys())

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """
        Głęboko łączy dwa słowniki.

        Override nadpisuje wartości w base.
        Nested dicts są merge'owane rekurencyjnie.

        Args:
            base: Słownik bazowy (domyślne wartości)
            override: Słownik nadpisujący

        Returns:
            Dict: Połączony słownik
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def reload(self) -> None:
        """
        Czyści cache i wymusza ponowne wczytanie plików.

        Przydatne podczas edycji plików YAML w runtime.
        """
        self._defaults = None
        self._terrain_costs = None
        self._unit_types = None


_default_loader: Optional[ConfigLoader] = None


def get_default_loader() -> ConfigLoader:
    """Współdzielony loader danych wbudowanych w pakiet (tylko do odczytu)."""
    global _default_loader
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader
