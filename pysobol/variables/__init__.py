"""The :mod:`pysobol.variables` module provides the inverse transform
sampling used to map uniform variates to the model parameters.
"""

from pysobol.variables.marginals import (
    QuantileMapper, NormalQuantileMapper, LogNormalQuantileMapper,
    UniformQuantileMapper, IndependentMarginalsQuantileMapper,
    get_quantile_mapper
)

__all__ = ["QuantileMapper", "NormalQuantileMapper",
           "LogNormalQuantileMapper", "UniformQuantileMapper",
           "IndependentMarginalsQuantileMapper", "get_quantile_mapper"]
