"""
PySobol : Sampling based Sobol' sensitivity indices of scalar models
"""

name = "pysobol"
