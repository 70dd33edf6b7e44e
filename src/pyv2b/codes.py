"""
Ecozone and jurisdiction code enumerations.

Ecozones are the 15 terrestrial ecozones of Canada used to stratify the
volume-to-biomass parameters (table 2 of appendix 7 of Boudewyn et al. 2007).
Jurisdictions are the two-letter province and territory codes.

These enums are informational: conversions validate ecozone and
jurisdiction only by whether the parameter tables contain them.

Usage:
    from pyv2b.codes import Ecozone, get_ecozone_name

    Ecozone.MONTANE_CORDILLERA.value   # 14
    get_ecozone_name(4)                # "Taiga Plains"
"""

from enum import Enum, IntEnum
from typing import Dict, List

__all__ = [
    'Ecozone',
    'Jurisdiction',
    'get_ecozone_name',
    'list_ecozones',
]


class Ecozone(IntEnum):
    """Terrestrial ecozones of Canada, by NFI ecozone number."""

    ARCTIC_CORDILLERA = 1
    NORTHERN_ARCTIC = 2
    SOUTHERN_ARCTIC = 3
    TAIGA_PLAINS = 4
    TAIGA_SHIELD = 5
    BOREAL_SHIELD = 6
    ATLANTIC_MARITIME = 7
    MIXEDWOOD_PLAINS = 8
    BOREAL_PLAINS = 9
    PRAIRIES = 10
    TAIGA_CORDILLERA = 11
    BOREAL_CORDILLERA = 12
    PACIFIC_MARITIME = 13
    MONTANE_CORDILLERA = 14
    HUDSON_PLAINS = 15

    @property
    def display_name(self) -> str:
        """Ecozone name in title case, e.g. ``"Taiga Plains"``."""
        return self.name.replace("_", " ").title()


class Jurisdiction(str, Enum):
    """
    Canadian province and territory codes.

    Inherits from (str, Enum) so members compare equal to the plain
    two-letter strings found in the parameter tables.
    """

    ALBERTA = "AB"
    BRITISH_COLUMBIA = "BC"
    MANITOBA = "MB"
    NEW_BRUNSWICK = "NB"
    NEWFOUNDLAND_AND_LABRADOR = "NL"
    NOVA_SCOTIA = "NS"
    NORTHWEST_TERRITORIES = "NT"
    NUNAVUT = "NU"
    ONTARIO = "ON"
    PRINCE_EDWARD_ISLAND = "PE"
    QUEBEC = "QC"
    SASKATCHEWAN = "SK"
    YUKON = "YT"

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return code in cls._value2member_map_


def get_ecozone_name(code: int) -> str:
    """Return the display name of an ecozone number.

    Raises:
        ValueError: If code is not an ecozone number
    """
    return Ecozone(code).display_name


def list_ecozones() -> List[Dict[str, object]]:
    """List all ecozones as ``{'code': int, 'name': str}`` records."""
    return [{'code': int(zone), 'name': zone.display_name} for zone in Ecozone]
