import numpy as np


def get_first_n_primes(n):
    primes = list()
    primes.append(2)
    num = 3
    while len(primes) < n:
        flag = True
        for i in range(2, int(num**.5) + 1):
            if (num % i == 0):
                flag = False
                break
        if flag is True:
            primes.append(num)
        num += 2
    return np.asarray(primes[:n])


def get_random_state(random_state):
    """
    Return a :class:`numpy.random.RandomState`.

    Parameters
    ----------
    random_state : None, integer or :class:`numpy.random.RandomState`
        If None a new unseeded generator is created. If an integer it is
        used as the seed. An existing RandomState is returned unchanged
        so that its stream can be shared.
    """
    if random_state is None or isinstance(random_state, (int, np.integer)):
        return np.random.RandomState(random_state)
    if isinstance(random_state, np.random.RandomState):
        return random_state
    msg = f"random_state {random_state} cannot be used to seed a RandomState"
    raise ValueError(msg)
