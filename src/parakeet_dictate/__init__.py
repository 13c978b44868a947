"""parakeet-dictate: offline speech-to-text with a Parakeet TDT ONNX pipeline."""

__version__ = '0.1.0'
