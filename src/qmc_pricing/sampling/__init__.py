"""
Point sets in the unit cube.

Provides:
- Independent uniform (IID) points
- Scrambled Sobol' points (linear matrix scramble + digital shift)
- Shifted rank-1 lattice node sets
- Discrepancy measures
"""

from qmc_pricing.sampling.base import (
    PointSet,
    SamplingMethod,
    is_power_of_two,
)
from qmc_pricing.sampling.discrepancy import centered_discrepancy, discrepancy
from qmc_pricing.sampling.iid import generate_iid
from qmc_pricing.sampling.lattice import (
    CKN_GENERATING_VECTOR,
    LATTICE_MAX_DIMENSION,
    LatticeGenerator,
    generate_lattice,
)
from qmc_pricing.sampling.points import generate_points, make_generator, max_dimension
from qmc_pricing.sampling.sobol import (
    SOBOL_MAX_DIMENSION,
    SobolGenerator,
    direction_numbers,
    generate_sobol,
)

__all__ = [
    # Types
    "PointSet",
    "SamplingMethod",
    "is_power_of_two",
    # Generators
    "generate_iid",
    "generate_sobol",
    "generate_lattice",
    "generate_points",
    "make_generator",
    "max_dimension",
    "SobolGenerator",
    "LatticeGenerator",
    "direction_numbers",
    "SOBOL_MAX_DIMENSION",
    "LATTICE_MAX_DIMENSION",
    "CKN_GENERATING_VECTOR",
    # Discrepancy
    "discrepancy",
    "centered_discrepancy",
]
