import logging

import numpy as np


logger = logging.getLogger(__name__)


def compute_cov_sweep(estimator, cov_values, substitute_cov_variance=True,
                      normalize=False):
    """
    Compute the Sobol indices for a range of coefficients of variation.

    For each CoV the total index of ``estimator.indices`` and the lower
    index of its complement are computed. The estimator's ``cov`` is
    restored on exit.

    Parameters
    ----------
    estimator : :class:`pysobol.analysis.sensitivity_analysis.SobolIndices`
        The estimator

    cov_values : iterable (ncov)
        The coefficients of variation

    substitute_cov_variance : boolean
        True - the variance of each parameter in ``estimator.indices`` is
        ``(mean*cov)**2``. False - the variances are unchanged and the CoV
        is only recorded.

    normalize : boolean
        Normalize the indices by the model variance

    Returns
    -------
    results : np.ndarray (3, ncov)
        The total index of the index set, the lower index of the complement
        set and the model variance for each CoV
    """
    cov_values = np.atleast_1d(np.asarray(cov_values, dtype=float))
    complement_indices = estimator.complement_indices()
    if len(complement_indices) == 0:
        msg = "The index set contains every parameter so its complement "
        msg += "is empty"
        raise ValueError(msg)

    results = np.empty((3, cov_values.shape[0]))
    initial_cov = estimator.cov
    try:
        for ii, cov in enumerate(cov_values):
            estimator.cov = cov
            results[0, ii] = estimator.compute_sensitivity_indices(
                normalize=normalize,
                substitute_cov_variance=substitute_cov_variance)
            estimator.compute_sensitivity_indices(
                indices=complement_indices, normalize=normalize,
                substitute_cov_variance=substitute_cov_variance)
            results[1, ii] = estimator.lower_index
            results[2, ii] = estimator.model_variance
            logger.debug("CoV %g: %s", cov, results[:, ii])
    finally:
        estimator.cov = initial_cov
    return results


def write_cov_sweep(filename, cov_values, results):
    """
    Write one line per CoV with the space separated fields
    ``cov total_index lower_index_of_complement model_variance``.
    """
    cov_values = np.atleast_1d(np.asarray(cov_values, dtype=float))
    data = np.vstack([cov_values[np.newaxis, :], results]).T
    np.savetxt(filename, data, fmt="%.16g", delimiter=" ")


def cov_sweep(estimator, cov_values, filename=None, **kwargs):
    """
    Compute the Sobol indices for a range of coefficients of variation and
    write them to a file.

    If the file cannot be written the error is logged and the results are
    still returned.

    Parameters
    ----------
    estimator : :class:`pysobol.analysis.sensitivity_analysis.SobolIndices`
        The estimator

    cov_values : iterable (ncov)
        The coefficients of variation

    filename : string
        The name of the file. If None no file is written.

    kwargs : dict
        Keyword arguments of :func:`compute_cov_sweep`

    Returns
    -------
    results : np.ndarray (3, ncov)
        See :func:`compute_cov_sweep`
    """
    results = compute_cov_sweep(estimator, cov_values, **kwargs)
    if filename is None:
        return results
    try:
        write_cov_sweep(filename, cov_values, results)
    except OSError as e:
        logger.error("unable to write CoV sweep file %s: %s", filename, e)
    return results
