import logging
from functools import partial

import numpy as np
from scipy.optimize import OptimizeResult

from pysobol.expdesign.low_discrepancy_sequences import (
    get_sequence_generator
)
from pysobol.interface.model import ScalarModel
from pysobol.variables.marginals import IndependentMarginalsQuantileMapper


logger = logging.getLogger(__name__)


class SensitivityResult(OptimizeResult):
    pass


class SobolIndices(object):
    def __init__(self, model, constants, indices, distribution_params,
                 nvars, nsamples, cov=1.0, marginal_types=None,
                 sampling_method="halton", random_start=True,
                 random_permute=True, random_state=None):
        r"""
        Sampling based estimator of the non-normalized first order (lower)
        and total effect Sobol indices of a subset of model parameters.

        See

        Saltelli, Annoni et. al, Variance based sensitivity analysis of model
        output. Design and estimator for the total sensitivity index. 2010.
        https://doi.org/10.1016/j.cpc.2009.09.018

        Parameters
        ----------
        model : callable
            ``model(parameters, constants) -> float``

            where ``parameters`` is a np.ndarray (nvars) of the uncertain
            parameters and ``constants`` is a np.ndarray of fixed values

        constants : iterable
            The constants passed unchanged to every model evaluation

        indices : iterable
            The 1-based indices of the parameters whose sensitivity is
            computed. Each entry must be in [1, nvars] and unique

        distribution_params : iterable (nvars, 2)
            The mean and variance of each parameter

        nvars : integer
            The number of uncertain parameters

        nsamples : integer
            The number of Monte Carlo iterations. Each iteration evaluates
            the model four times

        cov : float
            The coefficient of variation used when the variances of the
            parameters in ``indices`` are replaced by ``(mean*cov)**2``

        marginal_types : list (nvars)
            The distribution family of each parameter. Defaults to
            "normal" for every parameter

        sampling_method : string
            The sequence used to draw the uniform variates. Supported types
            are ["halton", "random"]

        random_start : boolean
            Start the Halton sequence at a random index

        random_permute : boolean
            Randomly assign the Halton dimensions to the coordinates

        random_state : None, integer or :class:`numpy.random.RandomState`
            Seeds the randomization of the sequence generator
        """
        self.model = ScalarModel(model)
        self.constants = np.array(constants, dtype=float, ndmin=1)
        self.constants.setflags(write=False)
        self.nvars = self._check_nvars(nvars)
        self.distribution_params = self._check_distribution_params(
            distribution_params)
        self.indices = self._check_indices(indices)
        self.nsamples = self._check_nsamples(nsamples)
        self.cov = cov

        if marginal_types is None:
            marginal_types = ["normal"]*self.nvars
        if len(marginal_types) != self.nvars:
            msg = f"marginal_types has {len(marginal_types)} entries "
            msg += f"but nvars is {self.nvars}"
            raise ValueError(msg)
        self._quantile_mapper = IndependentMarginalsQuantileMapper(
            marginal_types)

        # two independent replicas of every parameter per draw
        self._generator = get_sequence_generator(
            sampling_method, 2*self.nvars, random_start=random_start,
            random_permute=random_permute, random_state=random_state)
        self.sampling_method = sampling_method

        self.lower_index = 0.
        self.total_index = 0.
        self.model_variance = 0.
        self.model_mean = 0.

        self._x1 = np.zeros(self.nvars)
        self._x2 = np.zeros(self.nvars)
        self._arg1 = np.zeros(self.nvars)
        self._arg2 = np.zeros(self.nvars)
        self._mask = self._get_index_mask(self.indices)
        logger.debug(
            "Created SobolIndices with nvars=%d nsamples=%d indices=%s",
            self.nvars, self.nsamples, sorted(self.indices))

    def _check_nvars(self, nvars):
        if int(nvars) != nvars or nvars < 1:
            raise ValueError(f"nvars must be a positive integer not {nvars}")
        return int(nvars)

    def _check_nsamples(self, nsamples):
        if int(nsamples) != nsamples or nsamples < 1:
            msg = f"nsamples must be a positive integer not {nsamples}"
            raise ValueError(msg)
        return int(nsamples)

    def _check_distribution_params(self, distribution_params):
        params = np.array(distribution_params, dtype=float)
        if params.ndim != 2 or params.shape[1] != 2:
            msg = "distribution_params must contain a (mean, variance) pair "
            msg += "for each parameter"
            raise ValueError(msg)
        if params.shape[0] != self.nvars:
            msg = f"distribution_params has {params.shape[0]} entries "
            msg += f"but nvars is {self.nvars}"
            raise ValueError(msg)
        if np.any(params[:, 1] < 0):
            raise ValueError("variances must be non-negative")
        params.setflags(write=False)
        return params

    def _check_indices(self, indices):
        indices = list(indices)
        for index in indices:
            if int(index) != index or index < 1 or index > self.nvars:
                msg = f"index {index} is not in [1, {self.nvars}]"
                raise ValueError(msg)
        unique_indices = frozenset(int(index) for index in indices)
        if len(unique_indices) != len(indices):
            raise ValueError(f"indices {indices} contain duplicates")
        return unique_indices

    def _get_index_mask(self, indices):
        mask = np.zeros(self.nvars, dtype=bool)
        mask[np.array([index-1 for index in indices], dtype=int)] = True
        return mask

    def _resolve_mask(self, indices):
        if indices is None:
            return self._mask
        indices = self._check_indices(indices)
        if len(indices) == 0:
            return self._mask
        return self._get_index_mask(indices)

    def _resolve_variances(self, uncertainties, substitute_cov_variance):
        if uncertainties is None or len(uncertainties) == 0:
            variances = self.distribution_params[:, 1].copy()
        else:
            variances = np.array(uncertainties, dtype=float)
            if variances.shape != (self.nvars,):
                msg = f"uncertainties has {variances.shape[0]} entries "
                msg += f"but nvars is {self.nvars}"
                raise ValueError(msg)
            if np.any(variances < 0):
                raise ValueError("uncertainties must be non-negative")
        if substitute_cov_variance:
            # only the parameters in the original index set are changed
            means = self.distribution_params[:, 0]
            variances[self._mask] = (means[self._mask]*self.cov)**2
        return variances

    def complement_indices(self):
        """
        Return the 1-based indices of the parameters not in ``indices``.
        """
        return frozenset(range(1, self.nvars+1)).difference(self.indices)

    def _transform_to_model_domain(self, variances):
        usamples = self._generator.current_draw()
        means = self.distribution_params[:, 0]
        self._x1 = self._quantile_mapper(
            usamples[:self.nvars], means, variances)
        self._x2 = self._quantile_mapper(
            usamples[self.nvars:], means, variances)

    def transform_to_model_domain(self, uncertainties=None,
                                  substitute_cov_variance=False):
        """
        Map the current draw of the sequence generator to two independent
        replicas ``x1``, ``x2`` of the parameters. Coordinate j of the draw
        defines ``x1[j]`` and coordinate j+nvars defines ``x2[j]``.

        Parameters
        ----------
        uncertainties : iterable (nvars)
            The variances to use instead of those in
            ``distribution_params``. If None or empty the variances of
            ``distribution_params`` are used.

        Returns
        -------
        x1, x2 : np.ndarray (nvars)
            The two replicas
        """
        variances = self._resolve_variances(
            uncertainties, substitute_cov_variance)
        self._transform_to_model_domain(variances)
        return self._x1, self._x2

    def _assign_model_arguments(self, mask):
        self._arg1 = np.where(mask, self._x1, self._x2)
        self._arg2 = np.where(mask, self._x2, self._x1)

    def assign_model_arguments(self, indices=None):
        """
        Mix the two replicas. For 1-based parameter j in the index set
        ``arg1[j-1] = x1[j-1]`` and ``arg2[j-1] = x2[j-1]``, otherwise
        ``arg1[j-1] = x2[j-1]`` and ``arg2[j-1] = x1[j-1]``.

        Parameters
        ----------
        indices : iterable
            The index set. If None or empty ``self.indices`` is used.

        Returns
        -------
        arg1, arg2 : np.ndarray (nvars)
            The hybrid argument vectors
        """
        self._assign_model_arguments(self._resolve_mask(indices))
        return self._arg1, self._arg2

    def compute_sensitivity_indices(self, uncertainties=None, indices=None,
                                    normalize=False,
                                    substitute_cov_variance=False):
        r"""
        Estimate the lower and total Sobol indices of a set of parameters.

        Each iteration evaluates :math:`f=f(x_1)`, :math:`f_2=f(x_2)`,
        :math:`m_1=f(a_1)` and :math:`m_2=f(a_2)` and the indices are

        .. math:: D_y = \frac{1}{N}\sum f(m_1-f_2), \qquad
                  D_T = \frac{1}{2N}\sum (f-m_2)^2

        Parameters
        ----------
        uncertainties : iterable (nvars)
            Variances used instead of those in ``distribution_params``.
            If None or empty the original variances are used.

        indices : iterable
            1-based parameter indices used instead of ``self.indices``.
            If None or empty ``self.indices`` is used.

        normalize : boolean
            True - divide the lower index by the model variance and the
            total index by twice the model variance. False - return the
            non-normalized indices.

        substitute_cov_variance : boolean
            True - replace the variance of each parameter in
            ``self.indices`` by ``(mean*self.cov)**2``

        Returns
        -------
        total_index : float
            The total effect index. The lower index, model variance and
            model mean are stored as attributes.

        Notes
        -----
        The model variance is not clipped. It can be negative for small
        ``nsamples`` and non-finite model values are propagated.
        """
        variances = self._resolve_variances(
            uncertainties, substitute_cov_variance)
        mask = self._resolve_mask(indices)

        f0_sum, D_sum, Dy_sum, DT_sum = 0., 0., 0., 0.
        for ii in range(self.nsamples):
            self._generator.next_draw()
            self._transform_to_model_domain(variances)
            self._assign_model_arguments(mask)

            f = self.model(self._x1, self.constants)
            f2 = self.model(self._x2, self.constants)
            model1 = self.model(self._arg1, self.constants)
            model2 = self.model(self._arg2, self.constants)

            f0_sum += f
            D_sum += f*f
            Dy_sum += f*(model1-f2)
            DT_sum += (f-model2)**2

        nsamples = np.float64(self.nsamples)
        self.model_mean = f0_sum/nsamples
        self.model_variance = D_sum/nsamples - self.model_mean**2
        Dy = Dy_sum/nsamples
        DT = DT_sum/nsamples
        if normalize:
            with np.errstate(divide="ignore", invalid="ignore"):
                self.lower_index = Dy/self.model_variance
                self.total_index = DT/(2.0*self.model_variance)
        else:
            self.lower_index = Dy
            self.total_index = DT/2.0
        logger.debug(
            "lower_index=%g total_index=%g model_variance=%g model_mean=%g",
            self.lower_index, self.total_index, self.model_variance,
            self.model_mean)
        return self.total_index

    def result(self):
        return SensitivityResult(
            {"lower_index": self.lower_index,
             "total_index": self.total_index,
             "model_variance": self.model_variance,
             "model_mean": self.model_mean})

    def reset(self):
        """
        Return the sequence generator to its initial position.
        """
        self._generator.reset()

    def __str__(self):
        lines = ["Members of SobolIndices:", ""]
        for name in ["nvars", "nsamples", "cov", "sampling_method",
                     "lower_index", "total_index", "model_variance",
                     "model_mean"]:
            lines.append(f"{name}: {getattr(self, name)}")
        lines.append("indices: " + " ".join(
            str(index) for index in sorted(self.indices)))
        lines.append("distribution_params (mean variance):")
        for mean, variance in self.distribution_params:
            lines.append(f"{mean} {variance}")
        return "\n".join(lines)

    def display_members(self):
        print(self)

    def __repr__(self):
        return "{0}(nvars={1}, nsamples={2}, indices={3})".format(
            self.__class__.__name__, self.nvars, self.nsamples,
            sorted(self.indices))


def _get_stats_functions(summary_stats):
    quantile_stats = []
    for q in [0.25, 0.75]:
        sfun = partial(np.quantile, q=q)
        sfun.__name__ = f'quantile-{q}'
        quantile_stats.append(sfun)
    stat_functions_dict = {"mean": np.mean,
                           "median": np.median,
                           "min": np.min,
                           "max": np.max,
                           "std": np.std,
                           "quantile-0.25": quantile_stats[0],
                           "quantile-0.75": quantile_stats[1]}
    for name in summary_stats:
        if name not in stat_functions_dict:
            msg = f"Summary stats {name} not supported\n"
            msg += f"Select from {list(stat_functions_dict.keys())}"
            raise ValueError(msg)
    return {name: stat_functions_dict[name] for name in summary_stats}


def repeat_sobol_indices(
        estimator, nrealizations,
        summary_stats=["mean", "median", "min", "max", "quantile-0.25",
                       "quantile-0.75"], **kwargs):
    """
    Compute sobol indices for different sample sets. This allows estimation
    of the error due to finite sample sizes. Each realization uses the next
    ``estimator.nsamples`` draws of the estimator's sequence generator, so
    the model is evaluated 4 * nrealizations * nsamples times.

    Parameters
    ----------
    estimator : :class:`SobolIndices`
        The estimator

    nrealizations : integer
        The number of times the indices are estimated

    summary_stats : list
        The statistics of the realizations to return

    kwargs : dict
        Keyword arguments of
        :meth:`SobolIndices.compute_sensitivity_indices`

    Returns
    -------
    result : :class:`SensitivityResult`
        For each of "lower_index", "total_index", "model_variance" and
        "model_mean" a dictionary with each summary statistic and the
        raw values np.ndarray (nrealizations)
    """
    stat_functions = _get_stats_functions(summary_stats)
    if nrealizations < 1:
        raise ValueError("nrealizations must be a positive integer")
    data_names = ["lower_index", "total_index", "model_variance",
                  "model_mean"]
    data = dict((name, []) for name in data_names)
    for ii in range(nrealizations):
        estimator.compute_sensitivity_indices(**kwargs)
        for name in data_names:
            data[name].append(getattr(estimator, name))

    result = dict()
    for name in data_names:
        values = np.asarray(data[name])
        subdict = dict()
        for stat_name, sfun in stat_functions.items():
            subdict[stat_name] = sfun(values, axis=0)
        subdict["values"] = values
        result[name] = subdict
    return SensitivityResult(result)
