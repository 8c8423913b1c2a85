from abc import ABC, abstractmethod

import numpy as np
from scipy import stats
from scipy.special import ndtri


class QuantileMapper(ABC):
    """
    Inverse transform sampling for a family of univariate distributions
    parameterized by a mean and a variance.
    """
    name = None

    @abstractmethod
    def __call__(self, usamples, mean, variance):
        """
        Map uniform variates to samples of the distribution.

        Parameters
        ----------
        usamples : np.ndarray
            Uniform variates in (0, 1)

        mean : float or np.ndarray
            The mean defining the distribution. Must be broadcastable with
            usamples

        variance : float or np.ndarray
            The variance defining the distribution. Must be broadcastable
            with usamples

        Returns
        -------
        samples : np.ndarray
            The quantiles of the distribution at usamples
        """
        raise NotImplementedError

    @abstractmethod
    def frozen_variable(self, mean, variance):
        """
        Return the equivalent :mod:`scipy.stats` frozen variable.
        """
        raise NotImplementedError

    def __repr__(self):
        return "{0}()".format(self.__class__.__name__)


class NormalQuantileMapper(QuantileMapper):
    name = "normal"

    def __call__(self, usamples, mean, variance):
        return mean + np.sqrt(variance)*ndtri(usamples)

    def frozen_variable(self, mean, variance):
        return stats.norm(loc=mean, scale=np.sqrt(variance))


class LogNormalQuantileMapper(QuantileMapper):
    """
    The logarithm of the parameter is normally distributed. The mean and
    variance are those of the logarithm.
    """
    name = "lognormal"

    def __call__(self, usamples, mean, variance):
        return np.exp(mean + np.sqrt(variance)*ndtri(usamples))

    def frozen_variable(self, mean, variance):
        return stats.lognorm(s=np.sqrt(variance), scale=np.exp(mean))


class UniformQuantileMapper(QuantileMapper):
    name = "uniform"

    def _bounds(self, mean, variance):
        width = np.sqrt(12*variance)
        return mean-width/2, width

    def __call__(self, usamples, mean, variance):
        lb, width = self._bounds(mean, variance)
        return lb + width*usamples

    def frozen_variable(self, mean, variance):
        lb, width = self._bounds(mean, variance)
        return stats.uniform(loc=lb, scale=width)


QUANTILE_MAPPERS = {
    mapper.name: mapper for mapper in [
        NormalQuantileMapper, LogNormalQuantileMapper, UniformQuantileMapper]}


def get_quantile_mapper(name):
    if name not in QUANTILE_MAPPERS:
        msg = f"Distribution family {name} not supported. "
        msg += f"Select from {list(QUANTILE_MAPPERS.keys())}"
        raise ValueError(msg)
    return QUANTILE_MAPPERS[name]()


class IndependentMarginalsQuantileMapper(object):
    def __init__(self, marginal_types):
        """
        Inverse transform sampling of independent parameters, each of
        which can belong to a different distribution family.

        Parameters
        ----------
        marginal_types : list (nvars)
            The name of the distribution family of each parameter, e.g.
            ["normal", "lognormal", "uniform"]
        """
        self.marginal_types = list(marginal_types)
        self._mappers = []
        self._mapper_indices = []
        unique_types = sorted(set(self.marginal_types))
        for name in unique_types:
            self._mappers.append(get_quantile_mapper(name))
            self._mapper_indices.append(np.array(
                [ii for ii, mtype in enumerate(self.marginal_types)
                 if mtype == name]))

    def num_vars(self):
        return len(self.marginal_types)

    def marginals(self, means, variances):
        """
        Return the scipy.stats frozen variable of each parameter.
        """
        mappers = dict(zip(
            [m.name for m in self._mappers], self._mappers))
        return [mappers[name].frozen_variable(mean, var)
                for name, mean, var in zip(
                    self.marginal_types, means, variances)]

    def __call__(self, usamples, means, variances):
        """
        Parameters
        ----------
        usamples : np.ndarray (nvars)
            One uniform variate per parameter

        means : np.ndarray (nvars)
            The mean of each parameter

        variances : np.ndarray (nvars)
            The variance of each parameter

        Returns
        -------
        samples : np.ndarray (nvars)
            One sample of each parameter
        """
        if len(self._mappers) == 1:
            return self._mappers[0](usamples, means, variances)
        samples = np.empty(usamples.shape[0])
        for mapper, II in zip(self._mappers, self._mapper_indices):
            samples[II] = mapper(usamples[II], means[II], variances[II])
        return samples

    def __repr__(self):
        return "{0}(nvars={1})".format(
            self.__class__.__name__, self.num_vars())
