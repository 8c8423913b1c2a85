import numpy as np


class ScalarModel(object):
    def __init__(self, function):
        """
        A model with a single scalar output that depends on a vector of
        uncertain parameters and a vector of fixed constants.

        Parameters
        ----------
        function : callable
            ``function(parameters, constants) -> float``

            where ``parameters`` and ``constants`` are 1D np.ndarray. The
            function must not modify its arguments.
        """
        if isinstance(function, ScalarModel):
            function = function._user_function
        if not callable(function):
            raise ValueError("function must be callable")
        self._user_function = function
        self._nevaluations = 0

    def nevaluations(self):
        """
        Return the number of times the model has been evaluated.
        """
        return self._nevaluations

    def __call__(self, parameters, constants):
        value = self._user_function(parameters, constants)
        self._nevaluations += 1
        if np.ndim(value) == 0:
            return float(value)
        value = np.asarray(value)
        if value.size != 1:
            msg = "values returned by the model have the wrong shape."
            msg += " shape is {0} but must be a scalar".format(value.shape)
            raise ValueError(msg)
        return float(value.reshape(-1)[0])

    def __repr__(self):
        return "{0}(function={1})".format(
            self.__class__.__name__, self._user_function)
