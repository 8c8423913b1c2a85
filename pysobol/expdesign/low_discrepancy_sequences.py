from abc import ABC, abstractmethod

import numpy as np
from numba import njit

from pysobol.util.utilities import get_first_n_primes, get_random_state


MAX_HALTON_DIMENSION = 1000


@njit(cache=True)
def __halton_sequence(num_vars, index1, index2, primes):
    num_samples = index2-index1
    sequence = np.zeros((num_vars, num_samples))
    ones = np.ones(num_vars)

    kk = 0
    for ii in range(index1, index2):
        ff = ii*ones
        prime_inv = 1./primes
        summand = ii*num_vars
        while summand > 0:
            remainder = np.remainder(ff, primes)
            sequence[:, kk] += remainder*prime_inv
            prime_inv /= primes
            ff = ff//primes
            summand = ff.sum()
        kk += 1
    return sequence


def halton_sequence(num_vars, nsamples, start_index=0):
    """
    Generate a multivariate Halton sequence

    Parameters
    ----------
    num_vars : integer
        The number of dimensions

    nsamples : integer
        The number of samples needed

    start_index : integer
        The number of initial samples in the Halton sequence to skip

    Returns
    -------
    samples : np.ndarray (num_vars, nsamples)
        The low-discrepancy samples
    """
    index1, index2 = start_index, start_index + nsamples
    assert index1 < index2, "Index 1 must be < Index 2"
    if num_vars > MAX_HALTON_DIMENSION:
        msg = f"Number of variables must be <= {MAX_HALTON_DIMENSION}"
        raise ValueError(msg)
    primes = get_first_n_primes(num_vars).astype(float)
    return __halton_sequence(num_vars, index1, index2, primes)


class SequenceGenerator(ABC):
    """
    A stateful source of quasi-random or pseudo-random points in the
    open unit hypercube that is consumed one draw at a time.
    """
    def __init__(self, ncoords):
        if ncoords < 1:
            raise ValueError("ncoords must be a positive integer")
        self._ncoords = int(ncoords)
        self._draw = None

    def ncoords(self):
        return self._ncoords

    @abstractmethod
    def _next_draw(self):
        raise NotImplementedError

    @abstractmethod
    def _reset(self):
        raise NotImplementedError

    def next_draw(self):
        """
        Advance the generator and return the new draw.

        Returns
        -------
        draw : np.ndarray (ncoords)
            The coordinates of the draw. Each lies in (0, 1).
        """
        self._draw = self._next_draw()
        return self._draw

    def current_draw(self):
        if self._draw is None:
            raise RuntimeError(
                "next_draw must be called before reading coordinates")
        return self._draw

    def get_coordinate(self, kk):
        """
        Return coordinate ``kk`` (0-based) of the current draw.
        """
        return self.current_draw()[kk]

    def reset(self):
        """
        Return the generator to the position it had when constructed.
        """
        self._draw = None
        self._reset()

    def __repr__(self):
        return "{0}(ncoords={1})".format(
            self.__class__.__name__, self._ncoords)


class HaltonSequenceGenerator(SequenceGenerator):
    def __init__(self, ncoords, random_start=True, random_permute=True,
                 random_state=None, max_start_index=2**20, block_size=1024):
        """
        Randomized start, randomized permutation Halton sequence.

        Parameters
        ----------
        ncoords : integer
            The number of coordinates in each draw

        random_start : boolean
            True - the first draw is the Halton point with an index drawn
            uniformly from [1, max_start_index]. False - start at index 1.
            Index 0 is never used because it is the origin.

        random_permute : boolean
            True - randomly assign the Halton dimensions (primes) to the
            coordinates. False - coordinate k uses the k-th prime.

        random_state : None, integer or :class:`numpy.random.RandomState`
            The pseudo-random generator used to draw the start index and the
            permutation

        block_size : integer
            The number of Halton points generated at once and then served
            one draw at a time
        """
        super().__init__(ncoords)
        if self._ncoords > MAX_HALTON_DIMENSION:
            msg = f"ncoords must be <= {MAX_HALTON_DIMENSION}"
            raise ValueError(msg)
        if max_start_index < 1 or block_size < 1:
            raise ValueError("max_start_index and block_size must be >= 1")
        self._random_state = get_random_state(random_state)
        if random_start:
            self._start_index = int(
                self._random_state.randint(1, max_start_index+1))
        else:
            self._start_index = 1
        if random_permute:
            self._permutation = self._random_state.permutation(
                self._ncoords)
        else:
            self._permutation = np.arange(self._ncoords)
        self._block_size = int(block_size)
        self._reset()

    def start_index(self):
        return self._start_index

    def permutation(self):
        return self._permutation.copy()

    def _reset(self):
        self._index = self._start_index
        self._block = None
        self._block_start = None

    def _next_draw(self):
        if (self._block is None or
                self._index >= self._block_start+self._block_size):
            self._block_start = self._index
            self._block = halton_sequence(
                self._ncoords, self._block_size, self._block_start)
        draw = self._block[self._permutation, self._index-self._block_start]
        self._index += 1
        return draw


class MonteCarloSequenceGenerator(SequenceGenerator):
    def __init__(self, ncoords, random_state=None):
        """
        Pseudo-random draws on the open interval (0, 1) generated with
        the Mersenne twister of :class:`numpy.random.RandomState`.
        """
        super().__init__(ncoords)
        self._random_state = get_random_state(random_state)
        self._initial_state = self._random_state.get_state()

    def _reset(self):
        self._random_state.set_state(self._initial_state)

    def _next_draw(self):
        # 53 random bits shifted by half a unit so 0 and 1 are excluded
        ints = self._random_state.randint(
            0, 2**53, size=self._ncoords, dtype=np.int64)
        return (ints+0.5)/2.**53


def get_sequence_generator(method, ncoords, **kwargs):
    """
    Construct a sequence generator by name.

    Parameters
    ----------
    method : string
        Supported types are ["halton", "random"]

    ncoords : integer
        The number of coordinates in each draw

    kwargs : dict
        Keyword arguments passed to the generator constructor. The
        "random" generator ignores ``random_start`` and ``random_permute``.
    """
    if method == "random":
        kwargs.pop("random_start", None)
        kwargs.pop("random_permute", None)
    generators = {
        "halton": HaltonSequenceGenerator,
        "random": MonteCarloSequenceGenerator}
    if method not in generators:
        msg = f"Sampling method {method} not supported. "
        msg += f"Select from {list(generators.keys())}"
        raise ValueError(msg)
    return generators[method](ncoords, **kwargs)
