"""
LayerFactory Operators

Native and accelerated operator implementations. Arithmetic is delegated
to torch; the engine an operator runs on is fixed by its class.
"""
from layerfactory.operators.base import BaseOperator
from layerfactory.operators.activation import (
    AcceleratedReLUOperator,
    AcceleratedSigmoidOperator,
    AcceleratedTanHOperator,
    ReLUOperator,
    SigmoidOperator,
    TanHOperator,
)
from layerfactory.operators.common import (
    DropoutOperator,
    InputOperator,
    MemoryDataOperator,
)
from layerfactory.operators.convolution import (
    AcceleratedConvolutionOperator,
    ConvolutionOperator,
    DeconvolutionOperator,
)
from layerfactory.operators.data import (
    DenseDataOperator,
    ImageDepthLabelDataOperator,
    ImageLabelDataOperator,
    MeshImageLabelDataOperator,
)
from layerfactory.operators.loss import (
    AccuracyOperator,
    CRFLossOperator,
    SoftmaxWithLossOperator,
)
from layerfactory.operators.mesh import Image2MeshOperator
from layerfactory.operators.normalization import (
    AcceleratedLCNOperator,
    AcceleratedLRNOperator,
    LRNOperator,
)
from layerfactory.operators.pooling import AcceleratedPoolingOperator, PoolingOperator
from layerfactory.operators.softmax import AcceleratedSoftmaxOperator, SoftmaxOperator

__all__ = [
    "BaseOperator",
    # Convolution
    "ConvolutionOperator",
    "AcceleratedConvolutionOperator",
    "DeconvolutionOperator",
    # Pooling
    "PoolingOperator",
    "AcceleratedPoolingOperator",
    # Normalization
    "LRNOperator",
    "AcceleratedLRNOperator",
    "AcceleratedLCNOperator",
    # Activations
    "ReLUOperator",
    "AcceleratedReLUOperator",
    "SigmoidOperator",
    "AcceleratedSigmoidOperator",
    "TanHOperator",
    "AcceleratedTanHOperator",
    "SoftmaxOperator",
    "AcceleratedSoftmaxOperator",
    # Single engine
    "InputOperator",
    "MemoryDataOperator",
    "DropoutOperator",
    "SoftmaxWithLossOperator",
    "AccuracyOperator",
    "DenseDataOperator",
    "ImageLabelDataOperator",
    "ImageDepthLabelDataOperator",
    "MeshImageLabelDataOperator",
    "Image2MeshOperator",
    "CRFLossOperator",
]
