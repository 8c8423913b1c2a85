from pysobol.benchmarks.sensitivity_benchmarks import (
    linear_model, get_linear_model_statistics, ishigami_model,
    get_ishigami_function_statistics
)

__all__ = ["linear_model", "get_linear_model_statistics", "ishigami_model",
           "get_ishigami_function_statistics"]
