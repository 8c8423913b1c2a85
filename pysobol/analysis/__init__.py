from pysobol.analysis.sensitivity_analysis import (
    SobolIndices, SensitivityResult, repeat_sobol_indices
)
from pysobol.analysis.cov_sweeps import (
    compute_cov_sweep, write_cov_sweep, cov_sweep
)


__all__ = ["SobolIndices", "SensitivityResult", "repeat_sobol_indices",
           "compute_cov_sweep", "write_cov_sweep", "cov_sweep"]
