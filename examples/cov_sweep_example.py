"""
Coefficient of variation sweep
==============================
Compute how the total effect of the first parameter of a Vasicek style
bond price model, and the first order effect of the remaining parameters,
change as the coefficient of variation of the first parameter grows.
"""
import logging

import numpy as np

from pysobol.analysis import SobolIndices, cov_sweep


def bond_price(parameters, constants):
    a, b, sigma = parameters
    rate, maturity = constants
    B = (1-np.exp(-a*maturity))/a
    A = (b-sigma**2/(2*a**2))*(B-maturity)-sigma**2*B**2/(4*a)
    return np.exp(A-B*rate)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    distribution_params = [[0.5, 0.01], [0.05, 1e-4], [0.01, 1e-6]]
    estimator = SobolIndices(
        bond_price, [0.03, 5.], {1}, distribution_params, 3, 10000,
        random_state=1)
    estimator.compute_sensitivity_indices()
    estimator.display_members()

    cov_values = np.linspace(0.05, 0.3, 6)
    results = cov_sweep(estimator, cov_values, "cov_sweep.txt")
    for cov, row in zip(cov_values, results.T):
        print(cov, *row)
