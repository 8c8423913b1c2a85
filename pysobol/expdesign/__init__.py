"""The :mod:`pysobol.expdesign` module implements the low-discrepancy and
pseudo-random sequences used to sample the model parameters
"""

from pysobol.expdesign.low_discrepancy_sequences import (
    halton_sequence, HaltonSequenceGenerator, MonteCarloSequenceGenerator,
    get_sequence_generator
)


__all__ = ["halton_sequence", "HaltonSequenceGenerator",
           "MonteCarloSequenceGenerator", "get_sequence_generator"]
