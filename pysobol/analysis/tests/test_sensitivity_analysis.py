import io
import unittest
from contextlib import redirect_stdout

import numpy as np

from pysobol.analysis.sensitivity_analysis import (
    SobolIndices, SensitivityResult, repeat_sobol_indices
)
from pysobol.benchmarks.sensitivity_benchmarks import (
    linear_model, get_linear_model_statistics, ishigami_model,
    get_ishigami_function_statistics
)


def first_parameter_model(parameters, constants):
    return parameters[0]


class RecordingModel(object):
    def __init__(self, function):
        self.function = function
        self.calls = []

    def __call__(self, parameters, constants):
        self.calls.append(parameters.copy())
        return self.function(parameters, constants)


class TestSobolIndices(unittest.TestCase):
    def setUp(self):
        np.random.seed(1)

    def test_single_standard_normal_parameter(self):
        estimator = SobolIndices(
            first_parameter_model, [], {1}, [[0., 1.]], 1, 100000,
            random_state=1)
        total_index = estimator.compute_sensitivity_indices()
        assert total_index == estimator.total_index
        assert np.allclose(estimator.model_mean, 0, atol=5e-2)
        assert np.allclose(estimator.model_variance, 1, atol=5e-2)
        assert np.allclose(estimator.lower_index, 1, atol=5e-2)
        assert np.allclose(estimator.total_index, 1, atol=5e-2)

    def test_additive_linear_model(self):
        weights = np.array([1., 2., 3.])
        means = np.array([1., -1., 2.])
        variances = np.array([1., 0.5, 2.])
        estimator = SobolIndices(
            linear_model, weights, [2], np.vstack([means, variances]).T, 3,
            40000, random_state=2)

        estimator.compute_sensitivity_indices()
        mean, variance, lower_index, total_index = \
            get_linear_model_statistics(weights, means, variances, [2])
        assert np.allclose(lower_index, 2.)
        assert np.allclose(estimator.model_mean, mean, atol=5e-2)
        assert np.allclose(estimator.model_variance, variance, atol=0.5)
        assert np.allclose(estimator.lower_index, lower_index, atol=0.3)
        assert np.allclose(estimator.total_index, total_index, atol=0.1)

        estimator.compute_sensitivity_indices(indices=[1, 3])
        mean, variance, lower_index, total_index = \
            get_linear_model_statistics(weights, means, variances, [1, 3])
        assert np.allclose(lower_index, 19.)
        assert np.allclose(estimator.lower_index, lower_index, atol=1.)
        assert np.allclose(estimator.total_index, total_index, atol=0.6)

    def test_ishigami_function(self):
        a, b = 7, 0.1
        mean, variance, main_effects, total_effects = \
            get_ishigami_function_statistics(a, b)
        estimator = SobolIndices(
            ishigami_model, [a, b], {1}, [[0., np.pi**2/3]]*3, 3, 20000,
            marginal_types=["uniform"]*3, random_state=3)
        estimator.compute_sensitivity_indices(normalize=True)
        assert np.allclose(estimator.model_mean, mean, atol=0.1)
        assert np.allclose(estimator.model_variance, variance, atol=0.5)
        assert np.allclose(estimator.lower_index, main_effects[0], atol=3e-2)
        assert np.allclose(
            estimator.total_index, total_effects[0], atol=3e-2)

        estimator.compute_sensitivity_indices(indices={3}, normalize=True)
        assert np.allclose(estimator.lower_index, main_effects[2], atol=3e-2)
        assert np.allclose(
            estimator.total_index, total_effects[2], atol=3e-2)

    def test_random_sampling_method(self):
        estimator = SobolIndices(
            first_parameter_model, [], {1}, [[0., 1.]], 1, 20000,
            sampling_method="random", random_state=4)
        estimator.compute_sensitivity_indices()
        assert np.allclose(estimator.model_variance, 1, atol=6e-2)
        assert np.allclose(estimator.lower_index, 1, atol=6e-2)
        assert np.allclose(estimator.total_index, 1, atol=6e-2)

    def test_determinism(self):
        results = []
        for ii in range(2):
            estimator = SobolIndices(
                linear_model, [1., 2.], {1}, [[0., 1.], [1., 2.]], 2, 500,
                random_state=5)
            estimator.compute_sensitivity_indices()
            results.append(estimator.result())
        for name in ["lower_index", "total_index", "model_variance",
                     "model_mean"]:
            self.assertEqual(results[0][name], results[1][name])

        estimator.reset()
        estimator.compute_sensitivity_indices()
        self.assertEqual(estimator.total_index, results[0]["total_index"])

    def test_normalization(self):
        estimators = [
            SobolIndices(linear_model, [1., 2.], {2}, [[0., 1.], [1., 2.]],
                         2, 1000, random_state=6) for ii in range(2)]
        estimators[0].compute_sensitivity_indices()
        estimators[1].compute_sensitivity_indices(normalize=True)
        variance = estimators[0].model_variance
        assert np.allclose(estimators[1].model_variance, variance)
        assert np.allclose(
            estimators[1].lower_index, estimators[0].lower_index/variance)
        assert np.allclose(
            estimators[1].total_index, estimators[0].total_index/variance)

    def test_irrelevant_parameter(self):
        estimator = SobolIndices(
            first_parameter_model, [], {2}, [[3., 2.], [-1., 5.]], 2, 1000,
            random_state=7)
        estimator.compute_sensitivity_indices()
        self.assertEqual(estimator.lower_index, 0.)
        self.assertEqual(estimator.total_index, 0.)
        assert estimator.model_variance > 0

    def test_full_index_set(self):
        model = RecordingModel(linear_model)
        nsamples = 10
        estimator = SobolIndices(
            model, [1., -1., 2.], {1, 2, 3}, [[0., 1.]]*3, 3, nsamples,
            random_state=8)
        estimator.compute_sensitivity_indices()
        assert len(model.calls) == 4*nsamples
        assert estimator.model.nevaluations() == 4*nsamples
        fvals, f2vals = [], []
        for ii in range(nsamples):
            x1, x2, arg1, arg2 = model.calls[4*ii:4*ii+4]
            assert np.array_equal(arg1, x1)
            assert np.array_equal(arg2, x2)
            fvals.append(linear_model(x1, estimator.constants))
            f2vals.append(linear_model(x2, estimator.constants))
        fvals, f2vals = np.array(fvals), np.array(f2vals)
        assert np.allclose(
            estimator.lower_index, np.mean(fvals*(fvals-f2vals)))
        assert np.allclose(
            estimator.total_index, np.mean((fvals-f2vals)**2)/2)

    def test_assign_model_arguments(self):
        model = RecordingModel(linear_model)
        estimator = SobolIndices(
            model, [1., 1., 1.], {2}, [[0., 1.], [1., 2.], [2., 3.]], 3, 3,
            random_state=9)
        estimator.compute_sensitivity_indices()
        x1, x2, arg1, arg2 = model.calls[-4:]
        assert np.array_equal(arg1, [x2[0], x1[1], x2[2]])
        assert np.array_equal(arg2, [x1[0], x2[1], x1[2]])

        # the last draw is still current so the same replicas are produced
        new_x1, new_x2 = estimator.transform_to_model_domain()
        assert np.array_equal(new_x1, x1)
        assert np.array_equal(new_x2, x2)
        new_arg1, new_arg2 = estimator.assign_model_arguments({1, 3})
        assert np.array_equal(new_arg1, [x1[0], x2[1], x1[2]])
        assert np.array_equal(new_arg2, [x2[0], x1[1], x2[2]])
        new_arg1, new_arg2 = estimator.assign_model_arguments()
        assert np.array_equal(new_arg1, arg1)
        assert np.array_equal(new_arg2, arg2)

    def test_uncertainties_override(self):
        estimator = SobolIndices(
            first_parameter_model, [], {1}, [[0., 1.]], 1, 20000,
            random_state=10)
        estimator.compute_sensitivity_indices(uncertainties=[4.])
        assert np.allclose(estimator.model_variance, 4, atol=0.1)
        assert np.allclose(estimator.total_index, 4, atol=0.1)

    def test_overrides_do_not_change_configuration(self):
        params = [[0., 1.], [1., 2.], [2., 3.]]
        estimator1 = SobolIndices(
            linear_model, [1., 2., 3.], {1, 3}, params, 3, 300,
            random_state=11)
        estimator2 = SobolIndices(
            linear_model, [1., 2., 3.], {1, 3}, params, 3, 300,
            random_state=11)
        estimator1.compute_sensitivity_indices(
            uncertainties=[4., 4., 4.], indices={2},
            substitute_cov_variance=True)
        estimator2.compute_sensitivity_indices()
        assert np.array_equal(estimator1.distribution_params, params)
        self.assertEqual(estimator1.indices, {1, 3})
        estimator1.compute_sensitivity_indices()
        estimator2.compute_sensitivity_indices()
        self.assertEqual(estimator1.result(), estimator2.result())

    def test_empty_index_override_uses_own_index_set(self):
        estimators = [
            SobolIndices(linear_model, [1., 2.], {2}, [[0., 1.], [1., 2.]],
                         2, 200, random_state=12) for ii in range(2)]
        estimators[0].compute_sensitivity_indices(indices=[])
        estimators[1].compute_sensitivity_indices()
        self.assertEqual(estimators[0].result(), estimators[1].result())

    def test_substitute_cov_variance(self):
        estimator = SobolIndices(
            linear_model, [1., 1.], {1}, [[4., 1.], [1., 1.]], 2, 20000,
            cov=0.5, random_state=13)
        estimator.compute_sensitivity_indices()
        assert np.allclose(estimator.total_index, 1., atol=0.1)
        estimator.compute_sensitivity_indices(substitute_cov_variance=True)
        assert np.allclose(estimator.total_index, 4., atol=0.2)
        assert np.allclose(estimator.model_variance, 5., atol=0.25)

    def test_configuration_errors(self):
        params = [[0., 1.], [1., 2.]]
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], {1},
            params, 3, 10)
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], {0},
            params, 2, 10)
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], {3},
            params, 2, 10)
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], [1, 1],
            params, 2, 10)
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], {1},
            params, 2, 0)
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], {1},
            [[0., -1.], [1., 2.]], 2, 10)
        self.assertRaises(
            ValueError, SobolIndices, 1., [1., 1.], {1}, params, 2, 10)
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], {1},
            params, 2, 10, marginal_types=["normal"])
        self.assertRaises(
            ValueError, SobolIndices, linear_model, [1., 1.], {1},
            params, 2, 10, sampling_method="latin")

    def test_override_errors(self):
        estimator = SobolIndices(
            linear_model, [1., 1.], {1}, [[0., 1.], [1., 2.]], 2, 10)
        self.assertRaises(
            ValueError, estimator.compute_sensitivity_indices,
            uncertainties=[1., 2., 3.])
        self.assertRaises(
            ValueError, estimator.compute_sensitivity_indices,
            indices={3})
        self.assertRaises(
            ValueError, estimator.compute_sensitivity_indices,
            uncertainties=[1., -2.])

    def test_non_finite_model_values_are_propagated(self):
        estimator = SobolIndices(
            lambda p, c: np.nan, [], {1}, [[0., 1.]], 1, 10)
        total_index = estimator.compute_sensitivity_indices()
        assert np.isnan(total_index)
        assert np.isnan(estimator.lower_index)
        assert np.isnan(estimator.model_variance)
        assert np.isnan(estimator.model_mean)

    def test_constant_model(self):
        estimator = SobolIndices(
            lambda p, c: 3., [], {1}, [[0., 1.]], 1, 10)
        estimator.compute_sensitivity_indices()
        self.assertEqual(estimator.model_mean, 3.)
        self.assertEqual(estimator.model_variance, 0.)
        self.assertEqual(estimator.total_index, 0.)
        estimator.compute_sensitivity_indices(normalize=True)
        assert np.isnan(estimator.lower_index)
        assert np.isnan(estimator.total_index)

    def test_complement_indices(self):
        estimator = SobolIndices(
            linear_model, [1.]*4, {1, 3}, [[0., 1.]]*4, 4, 10)
        self.assertEqual(estimator.complement_indices(), {2, 4})

    def test_display_members(self):
        estimator = SobolIndices(
            linear_model, [1., 1., 1.], {1, 3}, [[0., 1.], [1., 2.], [2., 3.]],
            3, 10, random_state=14)
        estimator.compute_sensitivity_indices()
        stream = io.StringIO()
        with redirect_stdout(stream):
            estimator.display_members()
        output = stream.getvalue()
        assert "nsamples: 10" in output
        assert f"total_index: {estimator.total_index}" in output
        assert "indices: 1 3" in output
        assert "2.0 3.0" in output

    def test_repeat_sobol_indices(self):
        estimator = SobolIndices(
            linear_model, [1., 2.], {1}, [[0., 1.], [1., 2.]], 2, 200,
            random_state=15)
        nrealizations = 5
        result = repeat_sobol_indices(
            estimator, nrealizations, summary_stats=["mean", "std", "max"],
            normalize=True)
        assert isinstance(result, SensitivityResult)
        values = result["total_index"]["values"]
        assert values.shape == (nrealizations,)
        # each realization must use a different sample set
        assert values.std() > 0
        assert np.allclose(result["total_index"]["mean"], values.mean())
        assert np.allclose(
            result["model_mean"]["max"], result["model_mean"]["values"].max())
        self.assertRaises(
            ValueError, repeat_sobol_indices, estimator, 2,
            summary_stats=["mode"])


if __name__ == "__main__":
    sensitivity_analysis_test_suite = \
        unittest.TestLoader().loadTestsFromTestCase(TestSobolIndices)
    unittest.TextTestRunner(verbosity=2).run(sensitivity_analysis_test_suite)
