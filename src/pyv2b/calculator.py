"""
Volume-to-biomass calculation of Boudewyn et al. (2007).

Converts gross merchantable volume (m3/ha) into above-ground biomass
(tonnes/ha) in four stages:

1. Merchantable stem wood (Eq. 1, table 3):
   ``b_m = a * volume ** b``
2. Nonmerchantable stem wood (Eq. 2, table 4):
   ``nonmerchfactor = min(k + a * b_m ** b, cap)``, ``b_nm = nonmerchfactor * b_m``
3. Sapling stem wood (Eq. 3, table 5), only when a sapling model exists:
   ``saplingfactor = min(k + a * b_nm ** b, cap)``, ``b_s = saplingfactor * b_nm - b_nm``
4. Proportions of stem wood, bark, branches and foliage (Eqs. 4-7, table 6
   volume-based), a multinomial logit in ``volume`` and ``ln(volume + 5)``.

Only scenarios 1 and 2 of the publication are implemented
(``ImplementedScenario.CORE``). The biomass-based table 6 and the table 7
proportion caps are carried in the parameter bundle but not used.

Powers follow IEEE semantics, so a zero base with a negative exponent gives
a non-finite raw factor. Expanding a zero biomass by any factor gives zero.
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

import numpy as np

from .exceptions import InvalidInputError, validate_finite_non_negative
from .resolver import ParameterBundle

__all__ = [
    'ImplementedScenario',
    'BiomassResult',
    'BiomassCalculator',
    'BIOMASS_COMPONENTS',
    'compute',
]

ArrayLike = Union[float, np.ndarray]

# Output order of the eight biomass quantities
BIOMASS_COMPONENTS = (
    'b_m', 'b_n', 'b_nm', 'b_s', 'b_total', 'b_bark', 'b_branches', 'b_foliage',
)

# Offset inside the log-volume term of Eqs. 4-7
LOG_VOLUME_OFFSET = 5.0


class ImplementedScenario(Enum):
    """Calculation scenarios of the model that this package implements.

    CORE covers scenarios 1 and 2: stem wood from tables 3-5 and
    volume-driven proportions from table 6.
    """
    CORE = "core"


@dataclass(frozen=True)
class BiomassResult:
    """Above-ground biomass components in tonnes/ha.

    Attributes:
        b_m: Stem wood of merchantable-sized live trees (with stumps and tops)
        b_n: Stem wood of nonmerchantable-sized live trees
        b_nm: b_m + b_n
        b_s: Stem wood of sapling-sized live trees (0 without a sapling model)
        b_total: Total tree biomass
        b_bark: Bark biomass
        b_branches: Branch biomass
        b_foliage: Foliage biomass
    """
    b_m: float
    b_n: float
    b_nm: float
    b_s: float
    b_total: float
    b_bark: float
    b_branches: float
    b_foliage: float
    p_stemwood: float = field(default=float('nan'), repr=False)
    p_bark: float = field(default=float('nan'), repr=False)
    p_branches: float = field(default=float('nan'), repr=False)
    p_foliage: float = field(default=float('nan'), repr=False)
    b_snm: Optional[float] = field(default=None, repr=False)

    @property
    def has_sapling_model(self) -> bool:
        return self.b_snm is not None

    @property
    def proportions(self) -> Dict[str, float]:
        return {
            'stemwood': self.p_stemwood,
            'bark': self.p_bark,
            'branches': self.p_branches,
            'foliage': self.p_foliage,
        }

    def to_dict(self) -> Dict[str, float]:
        """The eight biomass quantities, in output order."""
        values = asdict(self)
        return {name: values[name] for name in BIOMASS_COMPONENTS}


def _capped_factor(row, base: np.ndarray) -> np.ndarray:
    """``min(k + a * base ** b, cap)`` for a table 4 or table 5 row."""
    with np.errstate(divide='ignore', invalid='ignore'):
        raw = row.k + row.a * np.power(base, row.b)
    return np.minimum(raw, row.cap)


def _expand(row, base: np.ndarray) -> np.ndarray:
    """``capped_factor * base``, zero wherever ``base`` is zero.

    At a zero base the raw factor may be +inf, -inf or NaN depending on the
    signs of ``a`` and ``b``; zero biomass stays zero in every case.
    """
    factor = _capped_factor(row, base)
    with np.errstate(invalid='ignore'):
        return np.where(base > 0, factor * base, 0.0)


def validate_volumes(volume: np.ndarray) -> None:
    """Reject any negative or non-finite volume before work is done."""
    bad = ~np.isfinite(volume) | (volume < 0)
    if bad.any():
        raise InvalidInputError("volume", volume[bad].tolist(),
                                "must be finite and not negative")


class BiomassCalculator:
    """Runs the four-stage volume-to-biomass pipeline on a resolved bundle.

    Args:
        scenario: Calculation scenario; only CORE is implemented
    """

    def __init__(self, scenario: ImplementedScenario = ImplementedScenario.CORE):
        try:
            self.scenario = ImplementedScenario(scenario)
        except ValueError:
            implemented = [s.value for s in ImplementedScenario]
            raise NotImplementedError(
                f"Scenario '{scenario}' is not implemented. "
                f"Implemented scenarios: {implemented}"
            ) from None

    def compute_arrays(self, bundle: ParameterBundle,
                       volume: np.ndarray) -> Dict[str, np.ndarray]:
        """Vectorised pipeline over an array of volumes.

        Returns:
            Arrays for the eight biomass quantities, the four proportions
            and ``b_snm`` (absent without a sapling model)

        Raises:
            InvalidInputError: If any volume is negative or not finite
        """
        volume = np.asarray(volume, dtype=float)
        validate_volumes(volume)

        b3, b4, b5, b6 = bundle.b3, bundle.b4, bundle.b5, bundle.b6_vol

        # Merchantable-sized stem wood
        b_m = b3.a * np.power(volume, b3.b)

        # Nonmerchantable-sized stem wood
        b_nm = _expand(b4, b_m)
        b_n = b_nm - b_m

        # Sapling-sized stem wood
        out: Dict[str, np.ndarray] = {}
        if b5 is not None:
            b_snm = _expand(b5, b_nm)
            b_s = b_snm - b_nm
            out['b_snm'] = b_snm
        else:
            b_s = np.zeros_like(b_nm)

        # Proportions of total biomass
        lvol = np.log(volume + LOG_VOLUME_OFFSET)
        p_a = np.exp(b6.a1 + b6.a2 * volume + b6.a3 * lvol)
        p_b = np.exp(b6.b1 + b6.b2 * volume + b6.b3 * lvol)
        p_c = np.exp(b6.c1 + b6.c2 * volume + b6.c3 * lvol)
        p_abc = 1 + p_a + p_b + p_c

        p_stemwood = 1 / p_abc
        p_bark = p_a / p_abc
        p_branches = p_b / p_abc
        p_foliage = p_c / p_abc

        b_total = (b_m + b_n + b_s) / p_stemwood

        out.update(
            b_m=b_m,
            b_n=b_n,
            b_nm=b_nm,
            b_s=b_s,
            b_total=b_total,
            b_bark=b_total * p_bark,
            b_branches=b_total * p_branches,
            b_foliage=b_total * p_foliage,
            p_stemwood=p_stemwood,
            p_bark=p_bark,
            p_branches=p_branches,
            p_foliage=p_foliage,
        )
        return out

    def compute(self, bundle: ParameterBundle, volume: float) -> BiomassResult:
        """Convert a single volume.

        Args:
            bundle: Resolved parameters
            volume: Gross merchantable volume (m3/ha), finite and >= 0

        Returns:
            BiomassResult

        Raises:
            InvalidInputError: If volume is negative or not finite
        """
        validate_finite_non_negative(volume, "volume")
        arrays = self.compute_arrays(bundle, np.asarray(float(volume)))
        values = {name: float(value) for name, value in arrays.items()}
        return BiomassResult(**values)


_default_calculator = BiomassCalculator()


def compute(bundle: ParameterBundle, volume: float) -> BiomassResult:
    """Convert a single volume with the CORE scenario."""
    return _default_calculator.compute(bundle, volume)
