"""
Test suite for the Python layer rule.
"""
import logging

import pytest


def _python(layer, module="python_layers", **params):
    from layerfactory.models.operator_spec import OperatorSpec

    params = {"module": module, "layer": layer, **params}
    return OperatorSpec("Python", name="py1", params=params)


class TestPythonRule:
    """Test construction through user modules."""

    def test_builds_user_operator(self, native_caps):
        import torch

        from layerfactory.rules.foreign import PythonRule
        from python_layers import ScaleOperator

        op = PythonRule()(_python("ScaleOperator", param_str="2.5"), native_caps)
        assert isinstance(op, ScaleOperator)
        assert torch.equal(op(torch.ones(2)), torch.full((2,), 2.5))

    def test_user_error_wrapped(self, native_caps, caplog):
        """User exceptions are logged with traceback and chained."""
        from layerfactory.exceptions import ForeignOperatorError
        from layerfactory.rules.foreign import PythonRule

        with caplog.at_level(logging.ERROR, logger="layerfactory.rules.foreign"):
            with pytest.raises(ForeignOperatorError, match="python_layers.broken_layer") as exc_info:
                PythonRule()(_python("broken_layer", param_str="x"), native_caps)

        assert isinstance(exc_info.value.__cause__, ValueError)
        assert exc_info.value.module == "python_layers"
        assert exc_info.value.layer == "broken_layer"
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors and errors[0].exc_info is not None
        assert "py1" in errors[0].getMessage()

    def test_missing_module(self, native_caps):
        from layerfactory.exceptions import ForeignOperatorError
        from layerfactory.rules.foreign import PythonRule

        with pytest.raises(ForeignOperatorError) as exc_info:
            PythonRule()(_python("Layer", module="no_such_module_xyz"), native_caps)
        assert isinstance(exc_info.value.__cause__, ModuleNotFoundError)

    def test_missing_layer(self, native_caps):
        from layerfactory.exceptions import ForeignOperatorError
        from layerfactory.rules.foreign import PythonRule

        with pytest.raises(ForeignOperatorError) as exc_info:
            PythonRule()(_python("NoSuchLayer"), native_caps)
        assert isinstance(exc_info.value.__cause__, AttributeError)

    def test_not_callable(self, native_caps):
        from layerfactory.exceptions import ForeignOperatorError
        from layerfactory.rules.foreign import PythonRule

        with pytest.raises(ForeignOperatorError) as exc_info:
            PythonRule()(_python("NOT_CALLABLE"), native_caps)
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_result_must_be_operator(self, native_caps):
        from layerfactory.exceptions import ForeignOperatorError
        from layerfactory.rules.foreign import PythonRule

        with pytest.raises(ForeignOperatorError, match="expected a BaseOperator"):
            PythonRule()(_python("not_an_operator"), native_caps)

    @pytest.mark.parametrize("missing", ["module", "layer"])
    def test_names_required(self, native_caps, missing):
        from layerfactory.exceptions import ConfigurationError
        from layerfactory.models.operator_spec import OperatorSpec
        from layerfactory.rules.foreign import PythonRule

        params = {"module": "python_layers", "layer": "ScaleOperator"}
        del params[missing]
        with pytest.raises(ConfigurationError) as exc_info:
            PythonRule()(OperatorSpec("Python", name="py1", params=params), native_caps)
        assert exc_info.value.config_key == missing

    def test_initializes_once(self, native_caps, monkeypatch):
        """The import system is refreshed before the first build only."""
        import importlib

        from layerfactory.rules.foreign import PythonRule

        calls = []
        monkeypatch.setattr(importlib, "invalidate_caches", lambda: calls.append(1))

        rule = PythonRule()
        rule(_python("ScaleOperator"), native_caps)
        rule(_python("ScaleOperator"), native_caps)
        assert calls == [1]

    def test_has_no_resolve_step(self):
        from layerfactory.rules.foreign import PYTHON_RULE

        assert not hasattr(PYTHON_RULE, "resolve")
