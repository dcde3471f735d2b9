"""Factory Entry Point Tests for LayerFactory.

Covers create(), explain() and list_operators(), including the
resolution properties every registered type must satisfy.
"""
from __future__ import annotations

import pytest

# Minimally valid parameters per built-in type
MINIMAL_PARAMS = {
    "Accuracy": {},
    "CRFLoss": {},
    "Convolution": {},
    "Deconvolution": {},
    "Dropout": {},
    "Image2Mesh": {},
    "ImageDepthLabelData": {},
    "ImageLabelData": {"crop_size": 4},
    "Input": {"shape": [1, 3]},
    "LRN": {},
    "MemoryData": {"batch_size": 1},
    "MeshImageLabelData": {"batch_size": 2},
    "Pooling": {"kernel_size": 2, "method": "ave"},
    "ReLU": {},
    "Sigmoid": {},
    "Softmax": {},
    "SoftmaxWithLoss": {},
    "TanH": {},
}

NATIVE_CLASSES = {
    "Accuracy": "AccuracyOperator",
    "CRFLoss": "CRFLossOperator",
    "Convolution": "ConvolutionOperator",
    "Deconvolution": "DeconvolutionOperator",
    "Dropout": "DropoutOperator",
    "Image2Mesh": "Image2MeshOperator",
    "ImageDepthLabelData": "ImageDepthLabelDataOperator",
    "ImageLabelData": "ImageLabelDataOperator",
    "Input": "InputOperator",
    "LRN": "LRNOperator",
    "MemoryData": "MemoryDataOperator",
    "MeshImageLabelData": "MeshImageLabelDataOperator",
    "Pooling": "PoolingOperator",
    "ReLU": "ReLUOperator",
    "Sigmoid": "SigmoidOperator",
    "Softmax": "SoftmaxOperator",
    "SoftmaxWithLoss": "SoftmaxWithLossOperator",
    "TanH": "TanHOperator",
}


class TestCreate:
    """Tests for create()."""

    def test_example_max_pooling_is_native(self, registry, accelerated_caps) -> None:
        """Default max pooling resolves natively even with cuDNN present."""
        from layerfactory.factory import create
        from layerfactory.models.operator_spec import OperatorSpec
        from layerfactory.operators.pooling import PoolingOperator

        spec = OperatorSpec(
            "Pooling", engine="default",
            params={"method": "max", "kernel_size": 2}, num_outputs=1,
        )
        op = create(spec, capabilities=accelerated_caps, registry=registry)
        assert type(op) is PoolingOperator

    def test_example_undilated_convolution_is_accelerated(self, registry, accelerated_caps) -> None:
        from layerfactory.factory import create
        from layerfactory.models.operator_spec import OperatorSpec
        from layerfactory.operators.convolution import AcceleratedConvolutionOperator

        spec = OperatorSpec("Convolution", engine="default", params={"dilation": [1, 1]})
        op = create(spec, capabilities=accelerated_caps, registry=registry)
        assert type(op) is AcceleratedConvolutionOperator

    def test_accepts_mapping(self, registry, accelerated_caps) -> None:
        from layerfactory.factory import create
        from layerfactory.operators.activation import AcceleratedTanHOperator

        op = create(
            {"type": "TanH", "name": "tanh1", "engine": "cudnn"},
            capabilities=accelerated_caps,
            registry=registry,
        )
        assert type(op) is AcceleratedTanHOperator
        assert op.name == "tanh1"

    def test_unknown_type(self, registry, accelerated_caps) -> None:
        from layerfactory.exceptions import UnknownOperatorError
        from layerfactory.factory import create
        from layerfactory.models.operator_spec import OperatorSpec

        with pytest.raises(UnknownOperatorError, match="Scale"):
            create(OperatorSpec("Scale"), capabilities=accelerated_caps, registry=registry)

    def test_empty_registry_has_no_builtins(self, empty_registry, accelerated_caps) -> None:
        """An explicitly passed empty registry is searched, not the global one."""
        from layerfactory.exceptions import UnknownOperatorError
        from layerfactory.factory import create, explain, list_operators

        with pytest.raises(UnknownOperatorError, match="ReLU"):
            create({"type": "ReLU"}, capabilities=accelerated_caps, registry=empty_registry)
        with pytest.raises(UnknownOperatorError):
            explain({"type": "ReLU"}, capabilities=accelerated_caps, registry=empty_registry)
        assert list_operators(empty_registry) == []

    def test_passes_spec_and_caps(self, empty_registry, accelerated_caps) -> None:
        """create() hands the spec and snapshot to the creator unchanged."""
        from layerfactory.factory import create
        from layerfactory.models.operator_spec import OperatorSpec
        from layerfactory.operators.activation import ReLUOperator

        seen = []

        def creator(spec, caps):
            seen.append((spec, caps))
            return ReLUOperator(spec)

        empty_registry.register("Custom", creator)
        spec = OperatorSpec("Custom", name="c1")
        create(spec, capabilities=accelerated_caps, registry=empty_registry)
        assert seen == [(spec, accelerated_caps)]

    def test_uses_global_defaults(self, reset_globals, monkeypatch) -> None:
        """Without arguments create() uses the process-wide registry and probe."""
        import layerfactory.capabilities as capabilities
        from layerfactory.factory import create
        from layerfactory.models.operator_spec import OperatorSpec
        from layerfactory.operators.convolution import ConvolutionOperator

        monkeypatch.setattr(capabilities, "_detect_cudnn", lambda: (False, None))
        op = create(OperatorSpec("Convolution"))
        assert type(op) is ConvolutionOperator

    @pytest.mark.parametrize("type_name", sorted(MINIMAL_PARAMS))
    def test_instance_matches_type(self, registry, accelerated_caps, type_name) -> None:
        """Every type builds an operator of its own kind."""
        import layerfactory.operators as ops
        from layerfactory.factory import create
        from layerfactory.models.operator_spec import OperatorSpec

        spec = OperatorSpec(type_name, params=MINIMAL_PARAMS[type_name])
        op = create(spec, capabilities=accelerated_caps, registry=registry)
        assert op.type_name == type_name
        assert isinstance(op, getattr(ops, NATIVE_CLASSES[type_name]))

    @pytest.mark.parametrize("type_name", sorted(MINIMAL_PARAMS))
    def test_fresh_instances_same_choice(self, registry, accelerated_caps, type_name) -> None:
        """Repeated creation yields distinct instances of the same class."""
        from layerfactory.factory import create
        from layerfactory.models.operator_spec import OperatorSpec

        spec = OperatorSpec(type_name, params=MINIMAL_PARAMS[type_name])
        a = create(spec, capabilities=accelerated_caps, registry=registry)
        b = create(spec, capabilities=accelerated_caps, registry=registry)
        assert a is not b
        assert type(a) is type(b)


class TestExplain:
    """Tests for explain()."""

    def test_reports_downgrade(self, registry, accelerated_caps) -> None:
        from layerfactory.enums import Engine
        from layerfactory.factory import explain

        resolution = explain(
            {"type": "Convolution", "engine": "accelerated", "params": {"dilation": 2}},
            capabilities=accelerated_caps,
            registry=registry,
        )
        assert resolution.requested is Engine.ACCELERATED
        assert resolution.engine is Engine.NATIVE
        assert resolution.downgraded

        data = resolution.to_dict()
        assert data["impl"] == "ConvolutionOperator"
        assert data["variant"] == "native"
        assert data["reasons"][0]["code"] == "DILATION_UNSUPPORTED"

    def test_does_not_construct(self, registry, accelerated_caps) -> None:
        """explain() resolves specs whose construction would fail."""
        from layerfactory.factory import explain
        from layerfactory.operators.normalization import LRNOperator

        resolution = explain(
            {"type": "LRN", "params": {"local_size": 18}},
            capabilities=accelerated_caps,
            registry=registry,
        )
        assert resolution.impl is LRNOperator

    def test_plain_creator_rejected(self, empty_registry, accelerated_caps) -> None:
        from layerfactory.exceptions import ConfigurationError
        from layerfactory.factory import explain

        empty_registry.register("Custom", lambda spec, caps: None)
        with pytest.raises(ConfigurationError, match="cannot be explained"):
            explain({"type": "Custom"}, capabilities=accelerated_caps, registry=empty_registry)

    def test_python_layer_rejected(self, registry, accelerated_caps) -> None:
        from layerfactory.exceptions import ConfigurationError
        from layerfactory.factory import explain

        with pytest.raises(ConfigurationError):
            explain(
                {"type": "Python", "params": {"module": "m", "layer": "l"}},
                capabilities=accelerated_caps,
                registry=registry,
            )


class TestListOperators:
    """Tests for list_operators()."""

    def test_lists_builtins(self, registry) -> None:
        from layerfactory.factory import list_operators

        names = list_operators(registry)
        assert names == sorted(names)
        assert "Convolution" in names
        assert "Python" in names

    def test_top_level_exports(self) -> None:
        import layerfactory as lf

        for name in lf.__all__:
            assert hasattr(lf, name), name
