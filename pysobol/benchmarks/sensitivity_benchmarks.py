import numpy as np


def variance_linear_combination_of_indendent_variables(coef, variances):
    assert coef.shape[0] == variances.shape[0]
    return np.sum(coef**2*variances)


def linear_model(parameters, constants):
    """
    f(p, c) = sum_i c_i p_i
    """
    return np.dot(constants, parameters)


def get_linear_model_statistics(weights, means, variances, indices):
    """
    Return the mean, variance and the non-normalized lower and total Sobol
    indices of ``linear_model`` for a set of 1-based parameter indices.

    The model is additive so the lower and total indices of a set S are
    both sum_{i in S} w_i**2 Var(p_i)
    """
    weights = np.asarray(weights, dtype=float)
    variances = np.asarray(variances, dtype=float)
    mean = np.dot(weights, means)
    variance = variance_linear_combination_of_indendent_variables(
        weights, variances)
    II = np.array([index-1 for index in indices], dtype=int)
    lower_index = variance_linear_combination_of_indendent_variables(
        weights[II], variances[II])
    return mean, variance, lower_index, lower_index


def ishigami_model(parameters, constants):
    """
    The Ishigami function with constants [a, b]. The parameters are
    typically U[-pi, pi], i.e. mean 0 and variance pi**2/3
    """
    a, b = constants
    return (np.sin(parameters[0])+a*np.sin(parameters[1])**2 +
            b*parameters[2]**4*np.sin(parameters[0]))


def get_ishigami_function_statistics(a=7, b=0.1):
    """
    p_i(X_i) ~ U[-pi,pi]

    Returns
    -------
    mean, variance : float
        The mean and variance of the function

    main_effects, total_effects : np.ndarray (3)
        The normalized main and total effect indices of each variable
    """
    mean = a/2
    variance = a**2/8+b*np.pi**4/5+b**2*np.pi**8/18+0.5
    D_1 = b*np.pi**4/5+b**2*np.pi**8/50+0.5
    D_2, D_3, D_12, D_13 = a**2/8, 0, 0, b**2*np.pi**8/18-b**2*np.pi**8/50
    D_23, D_123 = 0, 0
    main_effects = np.array([D_1, D_2, D_3])/variance
    total_effects = np.array(
        [D_1+D_12+D_13+D_123, D_2+D_12+D_23+D_123,
         D_3+D_13+D_23+D_123])/variance
    return mean, variance, main_effects, total_effects
