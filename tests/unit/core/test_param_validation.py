"""
Test suite for parameter readers.

Each reader raises ConfigurationError naming the layer and the key.
"""
import pytest


def _spec(**params):
    from layerfactory.models.operator_spec import OperatorSpec
    return OperatorSpec("Convolution", name="conv1", params=params)


class TestReadIntTuple:
    """Test repeated integer parameters."""

    def test_missing_uses_default(self):
        from layerfactory.core.validation import read_int_tuple

        assert read_int_tuple(_spec(), "dilation", 1) == (1,)

    def test_empty_uses_default(self):
        from layerfactory.core.validation import read_int_tuple

        assert read_int_tuple(_spec(dilation=[]), "dilation", 1) == (1,)

    def test_scalar(self):
        from layerfactory.core.validation import read_int_tuple

        assert read_int_tuple(_spec(dilation=2), "dilation", 1) == (2,)

    def test_list(self):
        from layerfactory.core.validation import read_int_tuple

        assert read_int_tuple(_spec(dilation=[1, 2]), "dilation", 1) == (1, 2)

    @pytest.mark.parametrize("bad", [0, [1, 0], "2", [1.5], True])
    def test_invalid(self, bad):
        from layerfactory.core.validation import read_int_tuple
        from layerfactory.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError, match="conv1") as exc_info:
            read_int_tuple(_spec(dilation=bad), "dilation", 1, minimum=1)
        assert exc_info.value.config_key == "dilation"


class TestExpandSpatial:
    """Test broadcasting per-axis values."""

    def test_broadcast_single(self):
        from layerfactory.core.validation import expand_spatial

        assert expand_spatial((2,), 3) == (2, 2, 2)

    def test_exact(self):
        from layerfactory.core.validation import expand_spatial

        assert expand_spatial((1, 2), 2) == (1, 2)

    def test_mismatch(self):
        from layerfactory.core.validation import expand_spatial
        from layerfactory.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError, match="stride"):
            expand_spatial((1, 2), 3, "stride")


class TestScalarReaders:
    """Test positive int, float and enum readers."""

    def test_positive_int(self):
        from layerfactory.core.validation import read_positive_int
        from layerfactory.exceptions import ConfigurationError

        assert read_positive_int(_spec(group=2), "group", 1) == 2
        assert read_positive_int(_spec(), "group", 1) == 1
        with pytest.raises(ConfigurationError):
            read_positive_int(_spec(group=0), "group", 1)

    def test_float_bounds(self):
        from layerfactory.core.validation import read_float
        from layerfactory.exceptions import ConfigurationError

        assert read_float(_spec(ratio=1), "ratio", 0.5) == 1.0
        with pytest.raises(ConfigurationError):
            read_float(_spec(ratio=-0.1), "ratio", 0.5, minimum=0.0)
        with pytest.raises(ConfigurationError):
            read_float(_spec(ratio=2.0), "ratio", 0.5, maximum=1.0)
        with pytest.raises(ConfigurationError):
            read_float(_spec(ratio="high"), "ratio", 0.5)

    @pytest.mark.parametrize("raw", ["ave", "AVE", "Ave"])
    def test_enum_by_value_or_name(self, raw):
        from layerfactory.core.validation import read_enum
        from layerfactory.enums import PoolMethod

        assert read_enum(_spec(method=raw), "method", PoolMethod, PoolMethod.MAX) is PoolMethod.AVE

    def test_enum_default(self):
        from layerfactory.core.validation import read_enum
        from layerfactory.enums import PoolMethod

        assert read_enum(_spec(), "method", PoolMethod, PoolMethod.MAX) is PoolMethod.MAX

    def test_enum_invalid(self):
        from layerfactory.core.validation import read_enum
        from layerfactory.enums import PoolMethod
        from layerfactory.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError, match="method"):
            read_enum(_spec(method="median"), "method", PoolMethod, PoolMethod.MAX)
